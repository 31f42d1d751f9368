"""Assemble the three-folder collection document from a generation config."""

from __future__ import annotations

import itertools
import json
import logging
from collections.abc import Callable, Iterator
from datetime import datetime, timezone

from bruno_collection_generator.configuration.generation_settings import (
    CsvScenario,
    GenerationConfig,
    GeneratorSpec,
    QuerySpec,
    Scenario,
)
from bruno_collection_generator.configuration.loader import sanitize_name
from bruno_collection_generator.test_scripts import (
    TRANSACTION_REF_VARIABLE,
    csv_scenario_statements,
    data_preparation_statements,
    failure_lookup_statements,
    generator_probe_statements,
    negative_statements,
    render_script,
    scenario_statements,
)
from bruno_collection_generator.variable_generation import (
    ScriptDialect,
    synthesize,
    unique_bindings,
)

from .collection_models import (
    ENVIRONMENT_NAME,
    CollectionDocument,
    Environment,
    EnvironmentVariable,
    Folder,
    RequestItem,
    auth_settings,
)
from .payload_mutation import corrupt_payload

logger = logging.getLogger(__name__)

DATA_PREPARATION_FOLDER = "DataPreparation"
POSITIVE_FOLDER = "Positive Scenarios"
NEGATIVE_FOLDER = "Negative Scenarios"
MOCK_SERVER_URL = "http://localhost:3000"
BASE_URL_VARIABLE = "baseUrl"
BASE_URL_PLACEHOLDER = "{{" + BASE_URL_VARIABLE + "}}"


def assemble_collection(
    config: GenerationConfig, *, clock: Callable[[], datetime] = datetime.now
) -> CollectionDocument:
    """Build the collection document for one configuration.

    Sequence numbers restart at 1 in every folder and come from counters local
    to this call, so repeated calls produce identical numbering.

    Args:
      config: Validated generation configuration.
      clock: Source of the current time for the ``CurrentTransExeDate`` default.

    Returns:
      The assembled document with the data preparation, positive and negative folders.
    """
    folders = (
        Folder(DATA_PREPARATION_FOLDER, 1, _data_preparation_items(config)),
        Folder(POSITIVE_FOLDER, 2, _positive_items(config)),
        Folder(NEGATIVE_FOLDER, 3, _negative_items(config)),
    )
    logger.info(
        "Assembled collection %s with %s requests",
        config.collection_name,
        sum(len(folder.items) for folder in folders),
    )
    return CollectionDocument(
        name=config.collection_name,
        folders=folders,
        environments=(Environment(ENVIRONMENT_NAME, environment_variables(config, clock=clock)),),
    )


def environment_variables(
    config: GenerationConfig, *, clock: Callable[[], datetime] = datetime.now
) -> tuple[EnvironmentVariable, ...]:
    names = [query.variable_name for query in config.db_queries if query.variable_name]
    names.extend(spec.name for spec in config.variable_generators)
    declared: dict[str, EnvironmentVariable] = {}
    for name in names:
        declared.setdefault(name, EnvironmentVariable(name))
    fixed = (
        EnvironmentVariable(BASE_URL_VARIABLE, MOCK_SERVER_URL),
        EnvironmentVariable(TRANSACTION_REF_VARIABLE),
        EnvironmentVariable(
            "CurrentTransExeDate", clock().astimezone(timezone.utc).date().isoformat()
        ),
    )
    for variable in fixed:
        declared.setdefault(variable.name, variable)
    return tuple(declared.values())


def _data_preparation_items(config: GenerationConfig) -> tuple[RequestItem, ...]:
    seq = itertools.count(1)
    items = [_query_item(query, seq) for query in config.db_queries]
    items.extend(_generator_probe_item(spec, seq) for spec in config.variable_generators)
    return tuple(items)


def _query_item(query: QuerySpec, seq: Iterator[int]) -> RequestItem:
    return RequestItem(
        name=query.name,
        filename=f"{sanitize_name(query.name)}.bru",
        seq=next(seq),
        url=f"{MOCK_SERVER_URL}{query.endpoint}",
        method=query.http_method,
        test_script=render_script(data_preparation_statements(query)),
        docs=query.description,
    )


def _generator_probe_item(spec: GeneratorSpec, seq: Iterator[int]) -> RequestItem:
    return RequestItem(
        name=f"Generate {spec.name}",
        filename=f"{sanitize_name(spec.name + '_Generator')}.bru",
        seq=next(seq),
        url=f"{BASE_URL_PLACEHOLDER}/health",
        pre_request_script=synthesize(spec, ScriptDialect.EMBEDDED).text,
        test_script=render_script(generator_probe_statements(spec.name)),
        docs=f"Generate {spec.name} ({spec.kind}) using pre-request script",
        tags=("variable-generator", "setup"),
    )


def _positive_items(config: GenerationConfig) -> tuple[RequestItem, ...]:
    seq = itertools.count(1)
    items = [_scenario_item(config, scenario, seq) for scenario in config.scenarios]
    items.extend(
        _csv_scenario_item(config, scenario, run_index, seq)
        for run_index, scenario in enumerate(config.csv_scenarios, start=1)
    )
    return tuple(items)


def _scenario_item(
    config: GenerationConfig, scenario: Scenario, seq: Iterator[int]
) -> RequestItem:
    statements = scenario_statements(config.response_contract, config.assertions)
    return RequestItem(
        name=scenario.name,
        filename=f"{sanitize_name(scenario.name)}.bru",
        seq=next(seq),
        url=scenario.url,
        method=scenario.http_method,
        body=scenario.request_body or "",
        test_script=render_script(statements),
        docs=f"Test scenario: {scenario.name}",
        auth=auth_settings(config.auth),
    )


def _csv_scenario_item(
    config: GenerationConfig, scenario: CsvScenario, run_index: int, seq: Iterator[int]
) -> RequestItem:
    statements = csv_scenario_statements(scenario, config.response_contract, config.assertions)
    return RequestItem(
        name=scenario.name,
        filename=f"{sanitize_name(scenario.name)}.bru",
        seq=next(seq),
        url=f"{BASE_URL_PLACEHOLDER}/api/{sanitize_name(scenario.name.lower())}",
        method=scenario.type,
        body=scenario.request_body,
        pre_request_script=unique_bindings(config.variable_generators, run_index),
        test_script=render_script(statements),
        docs=f"CSV Test scenario: {scenario.name} (Type: {scenario.type})",
        auth=auth_settings(config.auth),
        tags=("csv-scenario",),
    )


def _negative_items(config: GenerationConfig) -> tuple[RequestItem, ...]:
    contract = config.response_contract
    target = config.api_target
    body = ""
    if target.request_payload is not None:
        corrupted = corrupt_payload(
            target.request_payload, contract.request_ref_path, contract.invalid_ref_value
        )
        body = json.dumps(corrupted, indent=2)
    invalid_data = RequestItem(
        name=f"{config.collection_name} - Invalid Data",
        filename=f"{sanitize_name(config.collection_name)}-invalid.bru",
        seq=1,
        url=target.api_url,
        method=target.http_method,
        body=body,
        test_script=render_script(negative_statements(contract)),
        docs="Negative scenario with invalid data",
        auth=auth_settings(config.auth),
    )
    failure_lookup = RequestItem(
        name="Verify Failure Recorded",
        filename="verify-failure-recorded.bru",
        seq=2,
        url=contract.failure_lookup_url,
        test_script=render_script(failure_lookup_statements()),
        docs="Verify failure was recorded in integration failures table",
    )
    return (invalid_data, failure_lookup)
