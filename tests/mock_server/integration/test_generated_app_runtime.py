"""Generated Flask mock server runtime tests."""

from __future__ import annotations

import importlib.util
import sys
import types
from pathlib import Path

from bruno_collection_generator.configuration import (
    CsvScenario,
    GenerationConfig,
    GeneratorSpec,
    QuerySpec,
)
from bruno_collection_generator.mock_server import plan_mock_server, render_flask_app

GENERATORS = (
    GeneratorSpec("TransExeDate", "currentDate"),
    GeneratorSpec("StampedAt", "currentDateTime"),
    GeneratorSpec("EffectiveDate", "futurePastDate", {"offset": 5}),
    GeneratorSpec("SettlementDate", "conditionalDate"),
    GeneratorSpec("CorrelationId", "correlationId", {"format": "short"}),
    GeneratorSpec("Amount", "randomNumber", {"min": 1, "max": 3}),
    GeneratorSpec("Code", "randomString", {"length": 6, "charset": "numeric"}),
    GeneratorSpec("Epoch", "timestamp", {"format": "unix"}),
    GeneratorSpec("Mystery", "bogus"),
)


def _config() -> GenerationConfig:
    return GenerationConfig(
        collection_name="Runtime Bundle",
        db_queries=(
            QuerySpec(
                name="Client Data",
                endpoint="/client-data",
                query="SELECT MAX(ID) AS VALUE, 'ExistentClient' AS KEY FROM Clients",
            ),
            QuerySpec(
                name="Client By Id",
                endpoint="/clients/:clientId",
                query="SELECT * FROM Clients WHERE ID = %s AND Region = %s",
                params=("clientId", "region"),
            ),
        ),
        variable_generators=GENERATORS,
        csv_scenarios=(
            CsvScenario(name="First", type="POST", request_body='{"id": "{{CorrelationId_1}}"}'),
            CsvScenario(name="Second", type="GET"),
        ),
    )


class _FakeCursor:
    def __init__(self, executed: list, rows: list[dict]) -> None:
        self._executed = executed
        self._rows = rows

    def __enter__(self) -> _FakeCursor:
        return self

    def __exit__(self, *exc_info) -> bool:
        return False

    def execute(self, query: str, parameters=None) -> None:
        self._executed.append((query, parameters))

    def fetchall(self) -> list[dict]:
        return self._rows


class _FakeConnection:
    def __init__(self, executed: list, rows: list[dict]) -> None:
        self._executed = executed
        self._rows = rows

    def __enter__(self) -> _FakeConnection:
        return self

    def __exit__(self, *exc_info) -> bool:
        return False

    def cursor(self, as_dict: bool = False) -> _FakeCursor:
        assert as_dict is True
        return _FakeCursor(self._executed, self._rows)


def _load_generated_app(tmp_path: Path, monkeypatch, connect) -> types.ModuleType:
    app_path = tmp_path / "app.py"
    app_path.write_text(render_flask_app(plan_mock_server(_config())), encoding="utf-8")
    driver = types.ModuleType("pymssql")
    driver.connect = connect  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "pymssql", driver)

    spec = importlib.util.spec_from_file_location("generated_mock_server", app_path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    monkeypatch.setitem(sys.modules, "generated_mock_server", module)
    spec.loader.exec_module(module)
    return module


def _unreachable_database(**_connect_kwargs):
    raise RuntimeError("db down")


def test_query_failure_becomes_structured_server_error(tmp_path: Path, monkeypatch) -> None:
    module = _load_generated_app(tmp_path, monkeypatch, _unreachable_database)

    response = module.app.test_client().get("/clients/7?region=EU")

    assert response.status_code == 500
    payload = response.get_json()
    assert payload["error"] == "db down"
    assert payload["timestamp"].endswith("Z")


def test_query_route_binds_parameters_positionally(tmp_path: Path, monkeypatch) -> None:
    executed: list = []
    connections: list[dict] = []
    rows = [{"VALUE": 7, "KEY": "ExistentClient"}]

    def _connect(**connect_kwargs):
        connections.append(connect_kwargs)
        return _FakeConnection(executed, rows)

    module = _load_generated_app(tmp_path, monkeypatch, _connect)
    client = module.app.test_client()

    by_id = client.get("/clients/7?region=EU")
    summary = client.get("/client-data")

    assert by_id.status_code == 200
    assert by_id.get_json() == rows
    assert summary.get_json() == rows
    assert executed == [
        ("SELECT * FROM Clients WHERE ID = %s AND Region = %s", ("7", "EU")),
        ("SELECT MAX(ID) AS VALUE, 'ExistentClient' AS KEY FROM Clients", None),
    ]
    assert connections[0]["server"] == "localhost"
    assert connections[0]["port"] == 1433


def test_every_generator_route_returns_a_value(tmp_path: Path, monkeypatch) -> None:
    module = _load_generated_app(tmp_path, monkeypatch, _unreachable_database)
    client = module.app.test_client()

    payloads = {}
    for spec in GENERATORS:
        response = client.get(f"/generate/{spec.name}")
        assert response.status_code == 200, spec.name
        payloads[spec.name] = response.get_json()

    assert all(payloads[spec.name]["type"] == spec.kind for spec in GENERATORS)
    assert all(payloads[spec.name]["key"] == spec.name for spec in GENERATORS)
    assert payloads["Mystery"]["value"] == "ERROR_UNKNOWN_TYPE"
    assert payloads["Amount"]["value"] in {1, 2, 3}
    assert len(payloads["CorrelationId"]["value"]) == 8
    assert payloads["Code"]["value"].isdigit()
    assert len(payloads["TransExeDate"]["value"]) == 8


def test_health_route_reports_running_server(tmp_path: Path, monkeypatch) -> None:
    module = _load_generated_app(tmp_path, monkeypatch, _unreachable_database)

    response = module.app.test_client().get("/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "Server is running"


def test_suite_run_tallies_failures_and_keeps_going(tmp_path: Path, monkeypatch) -> None:
    module = _load_generated_app(tmp_path, monkeypatch, _unreachable_database)
    # A malformed scenario fails on its own without stopping the batch.
    module.SCENARIOS[0]["requestBody"] = None

    response = module.app.test_client().post("/test-suite/run-all")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["totalScenarios"] == 2
    assert payload["passed"] == 1
    assert payload["failed"] == 1
    first, second = payload["results"]
    assert first["status"] == "failed"
    assert first["scenarioName"] == "First"
    assert first["error"]
    assert second["status"] == "passed"
    assert second["scenarioIndex"] == 2
    assert set(second["variables"]) == {spec.name for spec in GENERATORS}


def test_suite_run_substitutes_suffixed_placeholders(tmp_path: Path, monkeypatch) -> None:
    module = _load_generated_app(tmp_path, monkeypatch, _unreachable_database)

    payload = module.app.test_client().post("/test-suite/run-all").get_json()

    first = payload["results"][0]
    assert payload["passed"] == 2
    assert first["requestBody"] == f'{{"id": "{first["variables"]["CorrelationId"]}"}}'


def test_unhandled_errors_use_the_global_error_handler(tmp_path: Path, monkeypatch) -> None:
    module = _load_generated_app(tmp_path, monkeypatch, _unreachable_database)

    @module.app.route("/explode")
    def explode():
        raise ValueError("exploded")

    client = module.app.test_client()
    failure = client.get("/explode")
    missing = client.get("/no-such-route")

    assert failure.status_code == 500
    assert failure.get_json()["error"] == "exploded"
    assert missing.status_code == 404
