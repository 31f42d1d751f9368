"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .generation_settings import (
    ApiTarget,
    AssertionSpec,
    AuthMode,
    AuthSpec,
    CsvScenario,
    DatabaseSettings,
    GenerationConfig,
    GeneratorKind,
    GeneratorSpec,
    QuerySpec,
    ResponseContract,
    Scenario,
)
from .loader import (
    ConfigurationError,
    load_configuration,
    parse_configuration,
    read_csv_scenarios,
    sanitize_name,
)

__all__ = [
    "ApiTarget",
    "AssertionSpec",
    "AuthMode",
    "AuthSpec",
    "CsvScenario",
    "DatabaseSettings",
    "GenerationConfig",
    "GeneratorKind",
    "GeneratorSpec",
    "QuerySpec",
    "ResponseContract",
    "Scenario",
    "ConfigurationError",
    "load_configuration",
    "parse_configuration",
    "read_csv_scenarios",
    "sanitize_name",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
