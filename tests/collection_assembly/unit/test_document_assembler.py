"""Collection document assembly tests."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
from bruno_collection_generator.collection_assembly import (
    DATA_PREPARATION_FOLDER,
    NEGATIVE_FOLDER,
    POSITIVE_FOLDER,
    assemble_collection,
    auth_settings,
    environment_variables,
)
from bruno_collection_generator.configuration import (
    ApiTarget,
    AssertionSpec,
    AuthSpec,
    CsvScenario,
    GenerationConfig,
    GeneratorSpec,
    QuerySpec,
    Scenario,
)

FROZEN_NOW = datetime(2024, 6, 14, 10, 0, 0, tzinfo=timezone.utc)


def _clock() -> datetime:
    return FROZEN_NOW


def _config(**overrides) -> GenerationConfig:
    values = {
        "collection_name": "Policy Inquiry",
        "db_queries": (
            QuerySpec(
                name="Existing Client",
                endpoint="/client-data",
                query="SELECT MAX(ID) AS VALUE, 'ExistentClient' AS KEY FROM Clients",
                variable_name="ExistentClient",
            ),
            QuerySpec(
                name="Active Policy",
                endpoint="/policy-data",
                query="SELECT TOP 1 ID AS VALUE, 'ActivePolicy' AS KEY FROM Policies",
                variable_name="ActivePolicy",
            ),
        ),
        "variable_generators": (
            GeneratorSpec("TransExeDate", "currentDate"),
            GeneratorSpec("CorrelationId", "correlationId"),
            GeneratorSpec("ExistentClient", "randomNumber"),
        ),
        "scenarios": (
            Scenario(
                name="Inquiry",
                url="https://api.example.com/inquiry",
                http_method="POST",
                request_body='{"client": "{{ExistentClient}}"}',
            ),
        ),
        "assertions": (AssertionSpec(type="status", expected="200"),),
        "auth": AuthSpec.bearer("token-1"),
        "api_target": ApiTarget(
            api_url="https://api.example.com/inquiry",
            request_payload={"TXLife": {"TXLifeRequest": {"TransRefGUID": "ref-1"}}},
        ),
    }
    values.update(overrides)
    return GenerationConfig(**values)


def test_collection_has_three_ordered_folders() -> None:
    document = assemble_collection(_config(), clock=_clock)

    assert [(folder.name, folder.seq) for folder in document.folders] == [
        (DATA_PREPARATION_FOLDER, 1),
        (POSITIVE_FOLDER, 2),
        (NEGATIVE_FOLDER, 3),
    ]


def test_data_preparation_holds_queries_then_generator_probes() -> None:
    config = _config()

    items = assemble_collection(config, clock=_clock).folder(DATA_PREPARATION_FOLDER).items

    expected_count = len(config.db_queries) + len(config.variable_generators)
    assert [item.seq for item in items] == list(range(1, expected_count + 1))
    assert items[0].url == "http://localhost:3000/client-data"
    assert items[0].filename == "Existing-Client.bru"
    assert items[2].name == "Generate TransExeDate"
    assert items[2].filename == "TransExeDate_Generator.bru"
    assert items[2].url == "{{baseUrl}}/health"
    assert items[2].tags == ("variable-generator", "setup")
    assert 'bru.setEnvVar("TransExeDate", generatedValue);' in items[2].pre_request_script


def test_client_data_request_stores_value_under_variable_name() -> None:
    config = _config(
        db_queries=(
            QuerySpec(
                name="Client Data",
                endpoint="/client-data",
                query="SELECT MAX(ID) AS VALUE, 'ExistentClient' AS KEY FROM Clients",
                variable_name="ExistentClient",
            ),
        ),
        variable_generators=(),
    )

    collection = assemble_collection(config, clock=_clock).to_dict()

    data_preparation = collection["items"][0]
    request = data_preparation["items"][0]["request"]
    assert request["url"] == "http://localhost:3000/client-data"
    assert request["method"] == "GET"
    assert 'bru.setEnvVar("ExistentClient", record.VALUE);' in request["tests"]


def test_positive_scenarios_use_configured_auth_and_custom_assertions() -> None:
    item = assemble_collection(_config(), clock=_clock).folder(POSITIVE_FOLDER).items[0]

    assert item.auth == {"mode": "bearer", "bearer": {"token": "token-1"}}
    assert item.body_mode == "json"
    assert item.to_dict()["request"]["body"]["json"] == '{"client": "{{ExistentClient}}"}'
    assert 'test("Status code is 200", function () {' in item.test_script
    assert 'test("Transaction result indicates success", function () {' in item.test_script


def test_csv_scenarios_follow_manual_scenarios_with_unique_bindings() -> None:
    config = _config(
        csv_scenarios=(
            CsvScenario(name="Bulk One", type="POST", request_body='{"id": "{{CorrelationId_1}}"}'),
            CsvScenario(name="Bulk Two", type="GET"),
        )
    )

    items = assemble_collection(config, clock=_clock).folder(POSITIVE_FOLDER).items

    assert [item.seq for item in items] == [1, 2, 3]
    assert items[1].url == "{{baseUrl}}/api/bulk-one"
    assert items[1].tags == ("csv-scenario",)
    assert 'bru.setEnvVar("CorrelationId_1", generatedValue);' in items[1].pre_request_script
    assert 'bru.setEnvVar("CorrelationId_2", generatedValue);' in items[2].pre_request_script
    assert items[2].body_mode == "none"


def test_negative_folder_corrupts_payload_and_verifies_failure() -> None:
    items = assemble_collection(_config(), clock=_clock).folder(NEGATIVE_FOLDER).items

    invalid, lookup = items
    assert invalid.name == "Policy Inquiry - Invalid Data"
    assert invalid.seq == 1
    assert json.loads(invalid.body)["TXLife"]["TXLifeRequest"]["TransRefGUID"] == "INVALID_ID"
    assert "be.oneOf([400, 422, 500])" in invalid.test_script
    assert lookup.seq == 2
    assert lookup.url == "http://localhost:3000/failure-data/{{TransRefGUID}}"
    assert lookup.auth == {"mode": "inherit"}


def test_negative_request_without_payload_has_no_body() -> None:
    config = _config(api_target=ApiTarget(api_url="https://api.example.com/inquiry"))

    invalid = assemble_collection(config, clock=_clock).folder(NEGATIVE_FOLDER).items[0]

    assert invalid.body == ""
    assert invalid.to_dict()["request"]["body"]["mode"] == "none"


def test_environment_variables_are_deduplicated_with_fixed_defaults() -> None:
    variables = environment_variables(_config(), clock=_clock)

    names = [variable.name for variable in variables]
    assert names == [
        "ExistentClient",
        "ActivePolicy",
        "TransExeDate",
        "CorrelationId",
        "baseUrl",
        "TransRefGUID",
        "CurrentTransExeDate",
    ]
    values = {variable.name: variable.value for variable in variables}
    assert values["baseUrl"] == "http://localhost:3000"
    assert values["CurrentTransExeDate"] == "2024-06-14"


def test_assembly_is_idempotent_with_frozen_clock() -> None:
    config = _config(csv_scenarios=(CsvScenario(name="Bulk", type="POST"),))

    first = assemble_collection(config, clock=_clock).to_dict()
    second = assemble_collection(config, clock=_clock).to_dict()

    assert first == second
    assert first["activeEnvironmentUid"] == second["activeEnvironmentUid"]


def test_document_dict_shape() -> None:
    collection = assemble_collection(_config(), clock=_clock).to_dict()

    assert collection["name"] == "Policy Inquiry"
    assert collection["version"] == "1"
    assert collection["environments"][0]["name"] == "DEV"
    assert collection["brunoConfig"]["ignore"] == ["node_modules", ".git"]
    assert collection["items"][0]["root"]["meta"] == {"name": "DataPreparation", "seq": 1}


def test_unknown_folder_lookup_raises() -> None:
    with pytest.raises(KeyError):
        assemble_collection(_config(), clock=_clock).folder("Missing")


@pytest.mark.parametrize(
    ("auth", "expected"),
    [
        (AuthSpec.none(), {"mode": "none"}),
        (
            AuthSpec.basic("user", "pw"),
            {"mode": "basic", "basic": {"username": "user", "password": "pw"}},
        ),
        (AuthSpec.bearer("t"), {"mode": "bearer", "bearer": {"token": "t"}}),
    ],
)
def test_auth_settings(auth: AuthSpec, expected: dict) -> None:
    assert auth_settings(auth) == expected


def test_current_trans_exe_date_default_is_the_utc_date() -> None:
    tokyo = timezone(timedelta(hours=9))
    early_morning_in_tokyo = datetime(2024, 6, 15, 2, 0, 0, tzinfo=tokyo)

    variables = environment_variables(_config(), clock=lambda: early_morning_in_tokyo)

    values = {variable.name: variable.value for variable in variables}
    assert values["CurrentTransExeDate"] == "2024-06-14"
