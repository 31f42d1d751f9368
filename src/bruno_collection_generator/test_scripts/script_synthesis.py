"""Build the test scripts attached to each collection request."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from bruno_collection_generator.configuration.generation_settings import (
    AssertionSpec,
    CsvScenario,
    QuerySpec,
    ResponseContract,
)

from .script_statements import (
    CaptureToEnv,
    CheckBlock,
    Comment,
    Expectation,
    LogValues,
    ParseBody,
    Ref,
    Statement,
    StoreFieldToEnv,
)

logger = logging.getLogger(__name__)

TRANSACTION_REF_VARIABLE = "TransRefGUID"
FAILURE_STATUSES = [400, 422, 500]

_STATUS = Ref("res.getStatus()")
_RESPONSE_TIME = Ref("res.getResponseTime()")
_BODY_TEXT = Ref(
    "(typeof res.getBody() === 'string' ? res.getBody() : JSON.stringify(res.getBody()))"
)


def status_is(code: int) -> CheckBlock:
    return CheckBlock(
        title=f"Status code is {code}", expectations=(Expectation(_STATUS, "equal", code),)
    )


def data_preparation_statements(query: QuerySpec) -> list[Statement]:
    """Status 200, body present, then ``VALUE`` stored under the query's variable."""
    statements: list[Statement] = [
        ParseBody("jsonData"),
        status_is(200),
        CheckBlock(
            title="Response contains data",
            expectations=(Expectation(Ref("jsonData"), "exist"),),
        ),
    ]
    if query.variable_name:
        statements.append(Comment("Store value in environment variable"))
        statements.append(StoreFieldToEnv("jsonData", "VALUE", query.variable_name))
    return statements


def positive_statements(contract: ResponseContract) -> list[Statement]:
    response = Ref("response")
    envelope_checks = tuple(
        Expectation(response.child(*path), "exist") for path in contract.envelope_paths
    )
    return [
        ParseBody("response"),
        *_capture_reference(contract),
        status_is(200),
        CheckBlock(title="Response has expected envelope", expectations=envelope_checks),
        CheckBlock(
            title="Transaction result indicates success",
            expectations=(
                Expectation(response.child(*contract.result_path), "exist"),
                Expectation(
                    response.child(*contract.result_code_path), "eql", contract.success_value
                ),
            ),
        ),
    ]


def negative_statements(contract: ResponseContract) -> list[Statement]:
    return [
        ParseBody("response"),
        *_capture_reference(contract, from_error=True),
        CheckBlock(
            title="Response indicates error",
            expectations=(Expectation(_STATUS, "be.oneOf", FAILURE_STATUSES),),
        ),
        CheckBlock(
            title="Error result exists",
            expectations=(Expectation(Ref("response").child(*contract.result_path), "exist"),),
        ),
    ]


def failure_lookup_statements() -> list[Statement]:
    return [
        ParseBody("responseData"),
        CheckBlock(
            title="Failure record exists",
            expectations=(Expectation(Ref("responseData"), "be.an('array').that.is.not.empty"),),
        ),
        status_is(200),
    ]


def generator_probe_statements(variable_name: str) -> list[Statement]:
    value = Ref(f"bru.getEnvVar({json.dumps(variable_name)})")
    return [
        Comment(f"Variable {variable_name} generated in pre-request script"),
        CheckBlock(
            title=f"Variable {variable_name} is set",
            expectations=(Expectation(value, "exist"),),
            logs=(LogValues((f"{variable_name} value:", value)),),
        ),
    ]


def custom_assertion_statements(assertions: Sequence[AssertionSpec]) -> list[Statement]:
    """One test block per user assertion; unsupported types become flagged comments."""
    statements: list[Statement] = []
    for assertion in assertions:
        block = _assertion_block(assertion)
        if block is None:
            logger.warning("Assertion type %r is not supported; skipping it", assertion.type)
            statements.append(
                Comment(f"Unsupported assertion type {assertion.type!r} was skipped")
            )
        else:
            statements.append(block)
    return statements


def scenario_statements(
    contract: ResponseContract, assertions: Sequence[AssertionSpec]
) -> list[Statement]:
    return [*positive_statements(contract), *custom_assertion_statements(assertions)]


def csv_scenario_statements(
    scenario: CsvScenario, contract: ResponseContract, assertions: Sequence[AssertionSpec]
) -> list[Statement]:
    statements = scenario_statements(contract, assertions)
    statements.append(
        CheckBlock(
            title=f"{scenario.name} - Scenario Type: {scenario.type}",
            expectations=(Expectation(_STATUS, "be.a", "number"),),
            logs=(
                LogValues(("Scenario:", scenario.name)),
                LogValues(("Scenario Type:", scenario.type)),
                LogValues(("Response Time:", _RESPONSE_TIME)),
            ),
        )
    )
    return statements


def _capture_reference(contract: ResponseContract, *, from_error: bool = False) -> list[Statement]:
    comment = "Extract transaction reference"
    if from_error:
        comment += " even from error response"
    return [
        Comment(comment),
        CaptureToEnv(
            source=Ref("response").child(*contract.transaction_ref_path),
            env_name=TRANSACTION_REF_VARIABLE,
            label=TRANSACTION_REF_VARIABLE,
        ),
    ]


def _assertion_block(assertion: AssertionSpec) -> CheckBlock | None:
    title = assertion.description
    if assertion.type == "status":
        expected = _numeric(assertion.expected)
        return CheckBlock(
            title=title or f"Status code is {assertion.expected}",
            expectations=(Expectation(_STATUS, "equal", expected),),
        )
    if assertion.type == "responseTime":
        return CheckBlock(
            title=title or f"Response time is below {assertion.expected}ms",
            expectations=(Expectation(_RESPONSE_TIME, "be.below", _numeric(assertion.expected)),),
        )
    if assertion.type == "jsonPath":
        return CheckBlock(
            title=title or f"JSON path {assertion.expected} is present",
            note=f"JSON path {assertion.expected} is not evaluated; only the body is checked",
            expectations=(Expectation(Ref("res.getBody()"), "exist"),),
        )
    if assertion.type == "body":
        return CheckBlock(
            title=title or f"Response body contains {assertion.expected}",
            expectations=(Expectation(_BODY_TEXT, "include", assertion.expected),),
        )
    return None


def _numeric(value: str) -> int | float | str:
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text
