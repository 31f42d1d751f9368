"""Configuration loader service."""

from __future__ import annotations

import csv
import json
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .generation_settings import (
    ApiTarget,
    AssertionSpec,
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

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")
GENERATOR_PARAMETER_KEYS = ("format", "offset", "condition", "min", "max", "length", "charset")

_KEY_ALIAS_PATTERN = re.compile(r"'([^']+)'\s+AS\s+\"?KEY\"?", re.IGNORECASE)
_PATH_PARAMETER_PATTERN = re.compile(r"(?::([A-Za-z_][A-Za-z0-9_]*)|\{([A-Za-z_][A-Za-z0-9_]*)\})")
_JDBC_PATTERN = re.compile(r"^jdbc:sqlserver://(?P<host>[^:;/]+)(?::(?P<port>\d+))?(?P<props>.*)$")


class ConfigurationError(Exception):
    """Raised when the generation configuration is invalid."""


def load_configuration(config_path: Path | str) -> GenerationConfig:
    """Load and validate a YAML or JSON generation configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")
    return parse_configuration(parsed, base_path=path.parent)


def parse_configuration(
    document: Mapping[str, Any], *, base_path: Path | None = None
) -> GenerationConfig:
    """Validate an already-decoded configuration mapping.

    Accepts the camelCase keys used by the browser form as well as snake_case
    keys. Missing optional lists default to empty.
    """
    collection_name = _require_non_empty_string(
        _pick(document, "collectionName", "collection_name"), "collectionName"
    )
    db_queries = tuple(
        _parse_query(item, index)
        for index, item in enumerate(
            _optional_list(_pick(document, "dbQueries", "db_queries", "dataQueries"), "dbQueries")
        )
    )
    generators = _parse_generators(
        _optional_list(
            _pick(document, "variableGenerators", "variable_generators"), "variableGenerators"
        )
    )
    scenarios = tuple(
        _parse_scenario(item, index)
        for index, item in enumerate(_optional_list(document.get("scenarios"), "scenarios"))
    )
    csv_scenarios = tuple(
        _parse_csv_scenario(item, index)
        for index, item in enumerate(
            _optional_list(_pick(document, "csvScenarios", "csv_scenarios"), "csvScenarios")
        )
    )
    csv_file = _pick(document, "csvScenariosFile", "csv_scenarios_file")
    if csv_file:
        csv_path = _resolve_path(
            base_path or Path.cwd(), _require_non_empty_string(csv_file, "csvScenariosFile")
        )
        csv_scenarios += read_csv_scenarios(csv_path)
    assertions = tuple(
        _parse_assertion(item, index)
        for index, item in enumerate(_optional_list(document.get("assertions"), "assertions"))
    )

    return GenerationConfig(
        collection_name=collection_name,
        db_queries=db_queries,
        variable_generators=generators,
        scenarios=scenarios,
        csv_scenarios=csv_scenarios,
        assertions=assertions,
        auth=parse_auth(document.get("auth")),
        db_config=parse_database_settings(_pick(document, "dbConfig", "db_config")),
        api_target=_parse_api_target(document),
        response_contract=_parse_response_contract(
            _pick(document, "responseContract", "response_contract")
        ),
    )


def read_csv_scenarios(csv_path: Path | str) -> tuple[CsvScenario, ...]:
    """Read `name,type,requestBody` rows from a CSV file with a header line."""
    path = Path(csv_path)
    if not path.exists():
        raise ConfigurationError(f"CSV scenarios file not found: {path}")
    with path.open(encoding="utf-8", newline="") as handle:
        rows = list(csv.reader(handle))
    scenarios: list[CsvScenario] = []
    for line_number, row in enumerate(rows[1:], start=1):
        if len(row) < 3:
            continue
        name, scenario_type, request_body = (value.strip() for value in row[:3])
        scenarios.append(
            CsvScenario(
                name=name or f"Scenario {line_number}",
                type=(scenario_type or "GET").upper(),
                request_body=request_body,
            )
        )
    return tuple(scenarios)


def parse_auth(value: Any) -> AuthSpec:
    """Normalize the auth section into an `AuthSpec`."""
    if value is None:
        return AuthSpec.none()
    section = _require_mapping(value, "auth")
    auth_type = str(section.get("type") or "none").strip().lower()
    if auth_type == "none":
        return AuthSpec.none()
    if auth_type == "basic":
        credentials = section.get("basicAuth") or section.get("basic_auth") or section
        credentials = _require_mapping(credentials, "auth.basicAuth")
        return AuthSpec.basic(
            username=_require_non_empty_string(credentials.get("username"), "auth.username"),
            password=_require_string(credentials.get("password"), "auth.password"),
        )
    if auth_type == "bearer":
        token = _pick(section, "token", "bearerToken", "bearer_token")
        return AuthSpec.bearer(_require_non_empty_string(token, "auth.token"))
    raise ConfigurationError(f"auth.type '{auth_type}' is not supported.")


def parse_database_settings(value: Any) -> DatabaseSettings:
    """Normalize the dbConfig section, including the JDBC URL form used by the browser form."""
    if value is None:
        return DatabaseSettings()
    section = _require_mapping(value, "dbConfig")
    jdbc_url = _pick(section, "jdbcUrl", "jdbc_url")
    if jdbc_url:
        return _parse_jdbc_settings(
            _require_non_empty_string(jdbc_url, "dbConfig.jdbcUrl"),
            user=_optional_string(_pick(section, "username", "user"), "dbConfig.username"),
            password=_optional_string(section.get("password"), "dbConfig.password"),
        )
    return DatabaseSettings(
        server=_optional_string(section.get("server"), "dbConfig.server") or "localhost",
        database=_optional_string(section.get("database"), "dbConfig.database") or "",
        user=_optional_string(_pick(section, "user", "username"), "dbConfig.user") or "",
        password=_optional_string(section.get("password"), "dbConfig.password") or "",
        port=_require_positive_int(section.get("port", 1433), "dbConfig.port"),
    )


def _parse_jdbc_settings(
    jdbc_url: str, *, user: str | None, password: str | None
) -> DatabaseSettings:
    match = _JDBC_PATTERN.match(jdbc_url)
    if match is None:
        raise ConfigurationError(
            "dbConfig.jdbcUrl must look like jdbc:sqlserver://host[:port];databaseName=NAME"
        )
    properties: dict[str, str] = {}
    for chunk in match.group("props").split(";"):
        key, _, raw = chunk.partition("=")
        if key.strip():
            properties[key.strip().lower()] = raw.strip()
    return DatabaseSettings(
        server=match.group("host"),
        port=int(match.group("port") or 1433),
        database=properties.get("databasename") or properties.get("database") or "",
        user=user or "",
        password=password or "",
    )


def _parse_query(value: Any, index: int) -> QuerySpec:
    label = f"dbQueries[{index}]"
    section = _require_mapping(value, label)
    name = _require_non_empty_string(section.get("name"), f"{label}.name")
    query = _require_non_empty_string(section.get("query"), f"{label}.query")
    endpoint = _optional_string(section.get("endpoint"), f"{label}.endpoint")
    if endpoint is None:
        endpoint = "/" + sanitize_name(name).lower().strip("-")
    elif not endpoint.startswith("/"):
        endpoint = "/" + endpoint
    params = section.get("params")
    if params is None:
        param_names = extract_path_parameters(endpoint)
    else:
        param_names = _normalize_string_sequence(params, f"{label}.params")
    variable_name = _optional_string(
        _pick(section, "variableName", "variable_name"), f"{label}.variableName"
    )
    if variable_name is None:
        key_match = _KEY_ALIAS_PATTERN.search(query)
        variable_name = key_match.group(1) if key_match else None
    return QuerySpec(
        name=name,
        endpoint=endpoint,
        query=query,
        http_method=_parse_http_method(_pick(section, "method", "httpMethod"), f"{label}.method"),
        params=param_names,
        variable_name=variable_name,
        description=_optional_string(section.get("description"), f"{label}.description") or "",
    )


def _parse_generators(items: Sequence[Any]) -> tuple[GeneratorSpec, ...]:
    generators: list[GeneratorSpec] = []
    seen: set[str] = set()
    for index, value in enumerate(items):
        label = f"variableGenerators[{index}]"
        section = _require_mapping(value, label)
        name = _require_non_empty_string(section.get("name"), f"{label}.name")
        if name in seen:
            raise ConfigurationError(f"{label}.name '{name}' is declared more than once.")
        seen.add(name)
        kind = _require_non_empty_string(_pick(section, "type", "kind"), f"{label}.type")
        nested = section.get("parameters") or {}
        if not isinstance(nested, Mapping):
            raise ConfigurationError(f"{label}.parameters must be a mapping.")
        parameters = {key: section[key] for key in GENERATOR_PARAMETER_KEYS if key in section}
        parameters.update(nested)
        _validate_generator_parameters(kind, parameters, label)
        generators.append(GeneratorSpec(name=name, kind=kind, parameters=parameters))
    return tuple(generators)


def _validate_generator_parameters(kind: str, parameters: Mapping[str, Any], label: str) -> None:
    if kind == GeneratorKind.FUTURE_PAST_DATE.value:
        _optional_int(parameters.get("offset"), f"{label}.offset")
    elif kind == GeneratorKind.RANDOM_NUMBER.value:
        minimum = _optional_int(parameters.get("min"), f"{label}.min")
        maximum = _optional_int(parameters.get("max"), f"{label}.max")
        minimum = 1000 if minimum is None else minimum
        maximum = 9999 if maximum is None else maximum
        if minimum >= maximum:
            raise ConfigurationError(f"{label}.min must be lower than {label}.max.")
    elif kind == GeneratorKind.RANDOM_STRING.value:
        length = _optional_int(parameters.get("length"), f"{label}.length")
        if length is not None and length <= 0:
            raise ConfigurationError(f"{label}.length must be greater than zero.")
        charset = parameters.get("charset")
        if charset not in (None, "", "alphanumeric", "alphabetic", "numeric"):
            raise ConfigurationError(
                f"{label}.charset must be one of alphanumeric, alphabetic, numeric."
            )


def _parse_scenario(value: Any, index: int) -> Scenario:
    label = f"scenarios[{index}]"
    section = _require_mapping(value, label)
    return Scenario(
        name=_require_non_empty_string(section.get("name"), f"{label}.name"),
        url=_require_non_empty_string(section.get("url"), f"{label}.url"),
        http_method=_parse_http_method(_pick(section, "method", "httpMethod"), f"{label}.method"),
        request_body=_body_text(
            _pick(section, "request", "requestBody", "request_body"), f"{label}.request"
        ),
    )


def _parse_csv_scenario(value: Any, index: int) -> CsvScenario:
    label = f"csvScenarios[{index}]"
    section = _require_mapping(value, label)
    return CsvScenario(
        name=_optional_string(section.get("name"), f"{label}.name") or f"Scenario {index + 1}",
        type=(_optional_string(section.get("type"), f"{label}.type") or "GET").upper(),
        request_body=_body_text(
            _pick(section, "requestBody", "request_body"), f"{label}.requestBody"
        )
        or "",
    )


def _parse_assertion(value: Any, index: int) -> AssertionSpec:
    label = f"assertions[{index}]"
    section = _require_mapping(value, label)
    expected = section.get("expected")
    if expected is None:
        raise ConfigurationError(f"{label}.expected is required.")
    return AssertionSpec(
        type=_require_non_empty_string(section.get("type"), f"{label}.type"),
        expected=str(expected).strip(),
        description=_optional_string(section.get("description"), f"{label}.description") or "",
    )


def _parse_api_target(document: Mapping[str, Any]) -> ApiTarget:
    payload = _pick(document, "requestPayload", "request_payload")
    if isinstance(payload, str):
        stripped = payload.strip()
        try:
            payload = json.loads(stripped) if stripped else None
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"requestPayload is not valid JSON: {exc}") from exc
    return ApiTarget(
        api_url=_optional_string(_pick(document, "apiUrl", "api_url"), "apiUrl") or "",
        http_method=_parse_http_method(document.get("method"), "method", default="POST"),
        request_payload=payload,
    )


def _parse_response_contract(value: Any) -> ResponseContract:
    defaults = ResponseContract()
    if value is None:
        return defaults
    section = _require_mapping(value, "responseContract")
    envelope = section.get("envelopePaths", section.get("envelope_paths"))
    return ResponseContract(
        transaction_ref_path=_dotted_path(
            _pick(section, "transactionRefPath", "transaction_ref_path"),
            defaults.transaction_ref_path,
        ),
        envelope_paths=(
            defaults.envelope_paths
            if envelope is None
            else tuple(
                _dotted_path(item, ())
                for item in _normalize_string_sequence(envelope, "envelopePaths")
            )
        ),
        result_path=_dotted_path(_pick(section, "resultPath", "result_path"), defaults.result_path),
        result_code_path=_dotted_path(
            _pick(section, "resultCodePath", "result_code_path"), defaults.result_code_path
        ),
        success_value=str(
            _pick(section, "successValue", "success_value") or defaults.success_value
        ),
        request_ref_path=_dotted_path(
            _pick(section, "requestRefPath", "request_ref_path"), defaults.request_ref_path
        ),
        invalid_ref_value=str(
            _pick(section, "invalidRefValue", "invalid_ref_value") or defaults.invalid_ref_value
        ),
        failure_lookup_url=str(
            _pick(section, "failureLookupUrl", "failure_lookup_url") or defaults.failure_lookup_url
        ),
    )


def sanitize_name(name: str) -> str:
    """Replace characters unsafe for file names with hyphens."""
    return re.sub(r"--+", "-", re.sub(r"[^a-zA-Z0-9_-]", "-", name))


def extract_path_parameters(endpoint: str) -> tuple[str, ...]:
    """Return `:name` and `{name}` path parameters in declaration order."""
    return tuple(
        colon or brace for colon, brace in _PATH_PARAMETER_PATTERN.findall(endpoint)
    )


def _dotted_path(value: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    if isinstance(value, str):
        parts = tuple(part for part in value.split(".") if part)
    elif isinstance(value, Sequence):
        parts = tuple(str(part) for part in value)
    else:
        raise ConfigurationError("responseContract paths must be dotted strings or lists.")
    if not parts:
        raise ConfigurationError("responseContract paths must not be empty.")
    return parts


def _body_text(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, (Mapping, list)):
        return json.dumps(value, indent=2)
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a JSON string or object.")
    return value.strip() or None


def _parse_http_method(value: Any, field_name: str, *, default: str = "GET") -> str:
    if value is None or value == "":
        return default
    method = _require_non_empty_string(value, field_name).upper()
    if method not in HTTP_METHODS:
        raise ConfigurationError(f"{field_name} must be one of {', '.join(HTTP_METHODS)}.")
    return method


def _pick(section: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if section.get(key) is not None:
            return section[key]
    return None


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _optional_list(value: Any, field_name: str) -> Sequence[Any]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ConfigurationError(f"{field_name} must be a list.")
    return value


def _normalize_string_sequence(value: Any, field_name: str) -> tuple[str, ...]:
    if isinstance(value, str):
        stripped = value.strip()
        return (stripped,) if stripped else ()
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            stripped = item.strip()
            if stripped:
                normalized.append(stripped)
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _optional_int(value: Any, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ConfigurationError(f"{field_name} must be an integer.") from exc
    raise ConfigurationError(f"{field_name} must be an integer.")


def _require_positive_int(value: Any, field_name: str) -> int:
    parsed = _optional_int(value, field_name)
    if parsed is None:
        raise ConfigurationError(f"{field_name} must be an integer.")
    if parsed <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return parsed
