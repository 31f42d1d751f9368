"""Serialize a mock server plan into a standalone Flask application module."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable

from .route_models import GeneratorRoute, MockServerPlan, QueryRoute, SuiteRoute

INDENT = "    "
REQUIREMENTS = ("flask", "pymssql")

_HEADER = '''"""Mock data server for the {collection} collection.

Generated by bruno-collection-generator. Install requirements.txt and start it
with ``python app.py``; the port defaults to 3000 and honours $PORT.
"""

import os
import random
import time
import uuid
from datetime import datetime, timedelta, timezone

import pymssql
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

app = Flask(__name__)
logger = app.logger
'''

_HELPERS = '''

def utc_timestamp():
    now = datetime.now().astimezone(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def error_response(error, status=500):
    return jsonify({"error": str(error), "timestamp": utc_timestamp()}), status


def run_query(query, parameters):
    with pymssql.connect(**DB_CONFIG) as connection:
        with connection.cursor(as_dict=True) as cursor:
            if parameters:
                cursor.execute(query, parameters)
            else:
                cursor.execute(query)
            return cursor.fetchall()


@app.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "Server is running", "timestamp": utc_timestamp()})
'''

_SUITE_RUNNER = '''

def run_scenario(scenario, scenario_index):
    started = time.monotonic()
    try:
        unique_vars = {name: generator() for name, generator in GENERATORS.items()}
        request_body = scenario["requestBody"]
        for name, value in unique_vars.items():
            placeholder = "{{" + name + "_" + str(scenario_index) + "}}"
            request_body = request_body.replace(placeholder, str(value))
        return {
            "scenarioIndex": scenario_index,
            "scenarioName": scenario["name"],
            "scenarioType": scenario["type"],
            "status": "passed",
            "responseTime": int((time.monotonic() - started) * 1000),
            "variables": unique_vars,
            "requestBody": request_body,
        }
    except Exception as error:  # pylint: disable=broad-except
        logger.error("Scenario %s failed: %s", scenario_index, error)
        return {
            "scenarioIndex": scenario_index,
            "scenarioName": scenario["name"],
            "scenarioType": scenario["type"],
            "status": "failed",
            "error": str(error),
            "variables": {},
        }


@app.route("{path}", methods=["POST"])
def run_test_suite():
    logger.info("Running %s CSV scenarios", len(SCENARIOS))
    results = [
        run_scenario(scenario, index) for index, scenario in enumerate(SCENARIOS, start=1)
    ]
    passed = sum(1 for result in results if result["status"] == "passed")
    return jsonify(
        {
            "totalScenarios": len(SCENARIOS),
            "passed": passed,
            "failed": len(results) - passed,
            "results": results,
            "timestamp": utc_timestamp(),
        }
    )
'''

_FOOTER = '''

@app.errorhandler(Exception)
def handle_unexpected_error(error):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Unhandled error")
    return error_response(error)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 3000))
    logger.info("Database: %s", DB_CONFIG.get("database") or "not configured")
    app.run(host="0.0.0.0", port=port)
'''


def render_flask_app(plan: MockServerPlan) -> str:
    """Render the complete ``app.py`` source for a mock server plan."""
    names = _IdentifierAllocator()
    sections = [_HEADER.replace("{collection}", _docstring_safe(plan.collection_name))]
    sections.append(_render_db_config(plan))
    sections.append(_HELPERS)
    for route in plan.query_routes:
        sections.append(_render_query_route(route, names))
    generator_functions = []
    for route in plan.generator_routes:
        function_name = names.allocate(f"generate_{route.name}")
        generator_functions.append((route.name, function_name))
        sections.append(_render_generator_route(route, function_name, names))
    if plan.test_suite is not None:
        sections.append(_render_test_suite(plan.test_suite, dict(generator_functions)))
    sections.append(_FOOTER)
    return "".join(sections)


def _render_db_config(plan: MockServerPlan) -> str:
    lines = ["", "DB_CONFIG = {"]
    for key, value in plan.connect_kwargs.items():
        lines.append(f"{INDENT}{json.dumps(key)}: {json.dumps(value)},")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _render_query_route(route: QueryRoute, names: _IdentifierAllocator) -> str:
    function_name = names.allocate(f"query_{route.name}")
    lines = [
        "",
        "",
        f"# {_comment_safe(route.description or route.name)}",
        f"@app.route({json.dumps(route.path)}, methods=[{json.dumps(route.http_method)}])",
        f"def {function_name}(**path_params):",
        f"{INDENT}query = {json.dumps(route.query)}",
    ]
    if route.bound_params:
        lines.append(f"{INDENT}parameters = (")
        for param in route.bound_params:
            source = (
                f"path_params.get({json.dumps(param)})"
                if param in route.path_params
                else f"request.args.get({json.dumps(param)})"
            )
            lines.append(f"{INDENT * 2}{source},")
        lines.append(f"{INDENT})")
    else:
        lines.append(f"{INDENT}parameters = ()")
    lines.extend(
        [
            f"{INDENT}try:",
            f"{INDENT * 2}return jsonify(run_query(query, parameters))",
            f"{INDENT}except Exception as error:  # pylint: disable=broad-except",
            f"{INDENT * 2}logger.error(\"Database error in %s: %s\", "
            f"{json.dumps(route.name)}, error)",
            f"{INDENT * 2}return error_response(error)",
        ]
    )
    return "\n".join(lines) + "\n"


def _render_generator_route(
    route: GeneratorRoute, function_name: str, names: _IdentifierAllocator
) -> str:
    view_name = names.allocate(f"{function_name}_route")
    key = json.dumps(route.name)
    lines = [
        "",
        "",
        f"# Variable generator: {_comment_safe(route.name)} ({_comment_safe(route.kind)})",
        f"def {function_name}():",
        *_indented(route.statements, 1),
        f"{INDENT}return generated_value",
        "",
        "",
        f"@app.route({json.dumps(route.path)}, methods=[\"GET\"])",
        f"def {view_name}():",
        f"{INDENT}try:",
        f"{INDENT * 2}value = {function_name}()",
        f"{INDENT}except Exception as error:  # pylint: disable=broad-except",
        f"{INDENT * 2}logger.error(\"Error generating %s: %s\", {key}, error)",
        f"{INDENT * 2}return error_response(error)",
        f"{INDENT}return jsonify(",
        f"{INDENT * 2}{{",
        f"{INDENT * 3}\"key\": {key},",
        f"{INDENT * 3}\"value\": value,",
        f"{INDENT * 3}\"type\": {json.dumps(route.kind)},",
        f"{INDENT * 3}\"timestamp\": utc_timestamp(),",
        f"{INDENT * 2}}}",
        f"{INDENT})",
    ]
    return "\n".join(lines) + "\n"


def _render_test_suite(suite: SuiteRoute, generator_functions: dict[str, str]) -> str:
    lines = ["", "", "GENERATORS = {"]
    for name in suite.generator_names:
        lines.append(f"{INDENT}{json.dumps(name)}: {generator_functions[name]},")
    lines.append("}")
    lines.extend(["", "SCENARIOS = ["])
    for scenario in suite.scenarios:
        lines.append(f"{INDENT}{{")
        lines.append(f"{INDENT * 2}\"name\": {json.dumps(scenario.name)},")
        lines.append(f"{INDENT * 2}\"type\": {json.dumps(scenario.type)},")
        lines.append(f"{INDENT * 2}\"requestBody\": {json.dumps(scenario.request_body)},")
        lines.append(f"{INDENT}}},")
    lines.append("]")
    runner = _SUITE_RUNNER.replace("{path}", suite.path)
    return "\n".join(lines) + "\n" + runner


def _indented(statements: Iterable[str], depth: int) -> list[str]:
    return [f"{INDENT * depth}{statement}" for statement in statements]


def _comment_safe(text: str) -> str:
    return " ".join(text.split())


def _docstring_safe(text: str) -> str:
    return _comment_safe(text).replace("\\", "/").replace('"""', "'''")


class _IdentifierAllocator:
    """Hands out unique Python identifiers derived from free-form names."""

    def __init__(self) -> None:
        self._used: set[str] = set()

    def allocate(self, raw: str) -> str:
        base = re.sub(r"[^0-9A-Za-z]+", "_", raw).strip("_").lower() or "route"
        if base[0].isdigit():
            base = f"n_{base}"
        candidate = base
        counter = 2
        while candidate in self._used:
            candidate = f"{base}_{counter}"
            counter += 1
        self._used.add(candidate)
        return candidate
