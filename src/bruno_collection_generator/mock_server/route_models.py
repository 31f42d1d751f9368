"""Route representation of the generated mock server."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class QueryRoute:  # pylint: disable=too-many-instance-attributes
    """Database lookup exposed over HTTP.

    `path` is already in Flask converter syntax. `path_params` lists the
    parameters taken from the URL; `bound_params` is the positional order in
    which all declared parameters are passed to the query.
    """

    name: str
    http_method: str
    path: str
    query: str
    path_params: tuple[str, ...]
    bound_params: tuple[str, ...]
    description: str = ""


@dataclass(frozen=True)
class GeneratorRoute:
    """`GET /generate/<name>` route running one runtime-dialect fragment."""

    name: str
    kind: str
    path: str
    statements: tuple[str, ...]


@dataclass(frozen=True)
class SuiteScenario:
    name: str
    type: str
    request_body: str


@dataclass(frozen=True)
class SuiteRoute:
    """`POST /test-suite/run-all` batch over the CSV scenarios."""

    path: str
    scenarios: tuple[SuiteScenario, ...]
    generator_names: tuple[str, ...]


@dataclass(frozen=True)
class MockServerPlan:
    """Everything the Flask renderer needs, in route registration order."""

    collection_name: str
    query_routes: tuple[QueryRoute, ...]
    generator_routes: tuple[GeneratorRoute, ...]
    test_suite: SuiteRoute | None
    connect_kwargs: Mapping[str, Any]
