"""Configuration loader tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from bruno_collection_generator.configuration import AuthMode
from bruno_collection_generator.configuration.loader import (
    ConfigurationError,
    extract_path_parameters,
    load_configuration,
    parse_configuration,
    read_csv_scenarios,
    sanitize_name,
)


def _write_file(path: Path, contents: str) -> Path:
    path.write_text(contents, encoding="utf-8")
    return path


def test_loads_yaml_configuration_with_defaults(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "config.yaml",
        """
collectionName: "Policy Inquiry"
dbQueries:
  - name: "Existing Client"
    endpoint: "/client-data"
    query: "SELECT MAX(ID) AS VALUE, 'ExistentClient' AS KEY FROM Clients"
variableGenerators:
  - name: "TransExeDate"
    type: "currentDate"
    format: "MMddyyyy"
""",
    )

    configuration = load_configuration(config_path)

    assert configuration.collection_name == "Policy Inquiry"
    query = configuration.db_queries[0]
    assert query.http_method == "GET"
    assert query.params == ()
    assert query.variable_name == "ExistentClient"
    assert configuration.variable_generators[0].parameter("format") == "MMddyyyy"
    assert configuration.scenarios == ()
    assert configuration.csv_scenarios == ()
    assert configuration.assertions == ()
    assert configuration.auth.mode is AuthMode.NONE
    assert configuration.db_config.port == 1433
    assert configuration.response_contract.success_value == "1"


def test_loads_json_configuration_with_browser_form_keys(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "config.json",
        json.dumps(
            {
                "collectionName": "Claims",
                "apiUrl": "https://api.example.com/claims",
                "method": "post",
                "requestPayload": json.dumps(
                    {"TXLife": {"TXLifeRequest": {"TransRefGUID": "abc"}}}
                ),
                "auth": {"type": "bearer", "token": "secret-token"},
                "dbConfig": {
                    "jdbcUrl": "jdbc:sqlserver://db.internal:1444;databaseName=Claims",
                    "username": "svc",
                    "password": "pw",
                },
                "scenarios": [
                    {
                        "name": "Create claim",
                        "url": "https://api.example.com/claims",
                        "method": "POST",
                        "request": {"id": "{{ClaimId}}"},
                    }
                ],
            }
        ),
    )

    configuration = load_configuration(config_path)

    assert configuration.api_target.http_method == "POST"
    assert configuration.api_target.request_payload == {
        "TXLife": {"TXLifeRequest": {"TransRefGUID": "abc"}}
    }
    assert configuration.auth.mode is AuthMode.BEARER
    assert configuration.auth.token == "secret-token"
    assert configuration.db_config.server == "db.internal"
    assert configuration.db_config.port == 1444
    assert configuration.db_config.database == "Claims"
    assert configuration.db_config.user == "svc"
    assert json.loads(configuration.scenarios[0].request_body or "") == {"id": "{{ClaimId}}"}


def test_endpoint_path_parameters_become_query_params() -> None:
    configuration = parse_configuration(
        {
            "collectionName": "Lookup",
            "dbQueries": [
                {
                    "name": "Client by id",
                    "endpoint": "/clients/:clientId/policies/{policyId}",
                    "query": "SELECT 1 AS VALUE, 'X' AS KEY",
                }
            ],
        }
    )

    assert configuration.db_queries[0].params == ("clientId", "policyId")


def test_query_endpoint_defaults_from_name() -> None:
    configuration = parse_configuration(
        {
            "collectionName": "Lookup",
            "dbQueries": [{"name": "Client Data", "query": "SELECT 1"}],
        }
    )

    assert configuration.db_queries[0].endpoint == "/client-data"
    assert configuration.db_queries[0].variable_name is None


def test_csv_scenarios_file_is_resolved_relative_to_config(tmp_path: Path) -> None:
    _write_file(
        tmp_path / "scenarios.csv",
        "name,type,requestBody\n"
        'Happy path,post,"{""id"": ""{{ClientId_1}}""}"\n'
        "incomplete,row\n"
        ",,\n",
    )
    config_path = _write_file(
        tmp_path / "config.yaml",
        'collectionName: "Bulk"\ncsvScenariosFile: "scenarios.csv"\n',
    )

    configuration = load_configuration(config_path)

    assert [scenario.name for scenario in configuration.csv_scenarios] == [
        "Happy path",
        "Scenario 3",
    ]
    assert configuration.csv_scenarios[0].type == "POST"
    assert configuration.csv_scenarios[0].request_body == '{"id": "{{ClientId_1}}"}'
    assert configuration.csv_scenarios[1].type == "GET"


def test_read_csv_scenarios_requires_existing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="CSV scenarios file not found"):
        read_csv_scenarios(tmp_path / "missing.csv")


def test_missing_configuration_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_configuration(tmp_path / "absent.yaml")


def test_collection_name_is_required() -> None:
    with pytest.raises(ConfigurationError, match="collectionName"):
        parse_configuration({"dbQueries": []})


def test_duplicate_generator_names_are_rejected() -> None:
    with pytest.raises(ConfigurationError, match="declared more than once"):
        parse_configuration(
            {
                "collectionName": "Dupes",
                "variableGenerators": [
                    {"name": "Id", "type": "correlationId"},
                    {"name": "Id", "type": "randomNumber"},
                ],
            }
        )


def test_random_number_bounds_must_be_ordered() -> None:
    with pytest.raises(ConfigurationError, match="min must be lower"):
        parse_configuration(
            {
                "collectionName": "Bounds",
                "variableGenerators": [
                    {"name": "Amount", "type": "randomNumber", "min": 10, "max": 10}
                ],
            }
        )


def test_unknown_generator_kind_is_accepted_for_later_reporting() -> None:
    configuration = parse_configuration(
        {
            "collectionName": "Unknown",
            "variableGenerators": [{"name": "Mystery", "type": "weird"}],
        }
    )

    assert configuration.variable_generators[0].kind == "weird"


def test_basic_auth_requires_username() -> None:
    with pytest.raises(ConfigurationError, match="auth.username"):
        parse_configuration(
            {"collectionName": "Auth", "auth": {"type": "basic", "password": "pw"}}
        )


def test_unsupported_auth_type_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="not supported"):
        parse_configuration({"collectionName": "Auth", "auth": {"type": "digest"}})


def test_invalid_http_method_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="must be one of"):
        parse_configuration(
            {
                "collectionName": "Methods",
                "scenarios": [{"name": "x", "url": "http://x", "method": "TRACE"}],
            }
        )


def test_response_contract_accepts_dotted_paths() -> None:
    configuration = parse_configuration(
        {
            "collectionName": "Contract",
            "responseContract": {
                "transactionRefPath": "Envelope.Ref",
                "resultCodePath": "Envelope.Result.Code",
                "successValue": "OK",
            },
        }
    )

    contract = configuration.response_contract
    assert contract.transaction_ref_path == ("Envelope", "Ref")
    assert contract.result_code_path == ("Envelope", "Result", "Code")
    assert contract.success_value == "OK"
    assert contract.invalid_ref_value == "INVALID_ID"


def test_sanitize_name_replaces_unsafe_characters() -> None:
    assert sanitize_name("Client Data / v2") == "Client-Data-v2"
    assert sanitize_name("ok_name-1") == "ok_name-1"


def test_extract_path_parameters_supports_both_styles() -> None:
    assert extract_path_parameters("/a/:first/b/{second}") == ("first", "second")
    assert extract_path_parameters("/plain") == ()
