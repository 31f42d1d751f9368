"""Build mock server routes from configuration entities."""

from __future__ import annotations

import re

from bruno_collection_generator.configuration.generation_settings import (
    GenerationConfig,
    GeneratorSpec,
    QuerySpec,
)
from bruno_collection_generator.configuration.loader import extract_path_parameters
from bruno_collection_generator.variable_generation import ScriptDialect, synthesize

from .route_models import (
    GeneratorRoute,
    MockServerPlan,
    QueryRoute,
    SuiteRoute,
    SuiteScenario,
)

TEST_SUITE_PATH = "/test-suite/run-all"

_COLON_PARAMETER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")
_BRACE_PARAMETER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def to_flask_path(endpoint: str) -> str:
    """Convert ``:name`` and ``{name}`` segments into Flask ``<name>`` converters."""
    path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
    path = _COLON_PARAMETER.sub(r"<\1>", path)
    return _BRACE_PARAMETER.sub(r"<\1>", path)


def synthesize_query_route(spec: QuerySpec) -> QueryRoute:
    path_params = extract_path_parameters(spec.endpoint)
    bound_params = spec.params or path_params
    return QueryRoute(
        name=spec.name,
        http_method=spec.http_method.upper(),
        path=to_flask_path(spec.endpoint),
        query=spec.query,
        path_params=path_params,
        bound_params=tuple(bound_params),
        description=spec.description,
    )


def synthesize_generator_route(spec: GeneratorSpec) -> GeneratorRoute:
    fragment = synthesize(spec, ScriptDialect.RUNTIME)
    return GeneratorRoute(
        name=spec.name,
        kind=spec.kind,
        path=f"/generate/{spec.name}",
        statements=fragment.lines,
    )


def plan_mock_server(config: GenerationConfig) -> MockServerPlan:
    """Collect every route of the mock server for one configuration."""
    test_suite = None
    if config.csv_scenarios:
        test_suite = SuiteRoute(
            path=TEST_SUITE_PATH,
            scenarios=tuple(
                SuiteScenario(name=item.name, type=item.type, request_body=item.request_body)
                for item in config.csv_scenarios
            ),
            generator_names=tuple(spec.name for spec in config.variable_generators),
        )
    return MockServerPlan(
        collection_name=config.collection_name,
        query_routes=tuple(synthesize_query_route(spec) for spec in config.db_queries),
        generator_routes=tuple(
            synthesize_generator_route(spec) for spec in config.variable_generators
        ),
        test_suite=test_suite,
        connect_kwargs=config.db_config.as_connect_kwargs(),
    )
