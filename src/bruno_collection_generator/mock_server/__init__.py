"""Mock server domain exports."""

from .flask_app_renderer import REQUIREMENTS, render_flask_app
from .route_models import (
    GeneratorRoute,
    MockServerPlan,
    QueryRoute,
    SuiteRoute,
    SuiteScenario,
)
from .route_synthesis import (
    TEST_SUITE_PATH,
    plan_mock_server,
    synthesize_generator_route,
    synthesize_query_route,
    to_flask_path,
)

__all__ = [
    "QueryRoute",
    "GeneratorRoute",
    "SuiteScenario",
    "SuiteRoute",
    "MockServerPlan",
    "synthesize_query_route",
    "synthesize_generator_route",
    "plan_mock_server",
    "to_flask_path",
    "TEST_SUITE_PATH",
    "render_flask_app",
    "REQUIREMENTS",
]
