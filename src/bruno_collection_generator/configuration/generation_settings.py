"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class GeneratorKind(str, Enum):
    """Supported variable generator kinds."""

    CURRENT_DATE = "currentDate"
    CURRENT_DATE_TIME = "currentDateTime"
    FUTURE_PAST_DATE = "futurePastDate"
    CONDITIONAL_DATE = "conditionalDate"
    CORRELATION_ID = "correlationId"
    RANDOM_NUMBER = "randomNumber"
    RANDOM_STRING = "randomString"
    TIMESTAMP = "timestamp"


class AuthMode(str, Enum):
    """Authentication modes understood by the collection document."""

    NONE = "none"
    BASIC = "basic"
    BEARER = "bearer"


@dataclass(frozen=True)
class GeneratorSpec:
    """Declarative description of one synthetic value producer.

    `kind` stays a plain string so that unknown kinds reach the synthesizer,
    which renders them as a visible error value instead of failing.
    """

    name: str
    kind: str
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def parameter(self, key: str, default: Any = None) -> Any:
        value = self.parameters.get(key)
        if value is None or value == "":
            return default
        return value


@dataclass(frozen=True)
class QuerySpec:  # pylint: disable=too-many-instance-attributes
    """Data-preparation database lookup exposed as a mock route."""

    name: str
    endpoint: str
    query: str
    http_method: str = "GET"
    params: tuple[str, ...] = ()
    variable_name: str | None = None
    description: str = ""


@dataclass(frozen=True)
class Scenario:
    """Manually authored API call exercised by the positive folder."""

    name: str
    url: str
    http_method: str = "GET"
    request_body: str | None = None


@dataclass(frozen=True)
class CsvScenario:
    """Bulk-loaded scenario; each run binds generator values suffixed by its index."""

    name: str
    type: str = "GET"
    request_body: str = ""


@dataclass(frozen=True)
class AuthSpec:
    """Tagged union of the supported authentication settings."""

    mode: AuthMode = AuthMode.NONE
    username: str | None = None
    password: str | None = None
    token: str | None = None

    @classmethod
    def none(cls) -> AuthSpec:
        return cls()

    @classmethod
    def basic(cls, username: str, password: str) -> AuthSpec:
        return cls(mode=AuthMode.BASIC, username=username, password=password)

    @classmethod
    def bearer(cls, token: str) -> AuthSpec:
        return cls(mode=AuthMode.BEARER, token=token)


@dataclass(frozen=True)
class AssertionSpec:
    """User-defined assertion compiled into scenario test scripts."""

    type: str
    expected: str
    description: str = ""


@dataclass(frozen=True)
class ResponseContract:  # pylint: disable=too-many-instance-attributes
    """Envelope paths and success value checked by positive and negative scripts."""

    transaction_ref_path: tuple[str, ...] = ("TXLife", "TXLifeResponse", "TransRefGUID")
    envelope_paths: tuple[tuple[str, ...], ...] = (
        ("TXLife",),
        ("TXLife", "TXLifeResponse"),
    )
    result_path: tuple[str, ...] = ("TXLife", "TXLifeResponse", "TransResult")
    result_code_path: tuple[str, ...] = (
        "TXLife",
        "TXLifeResponse",
        "TransResult",
        "ResultCode",
        "@tc",
    )
    success_value: str = "1"
    request_ref_path: tuple[str, ...] = ("TXLife", "TXLifeRequest", "TransRefGUID")
    invalid_ref_value: str = "INVALID_ID"
    failure_lookup_url: str = "http://localhost:3000/failure-data/{{TransRefGUID}}"


@dataclass(frozen=True)
class ApiTarget:
    """Top-level request template used by the negative scenario."""

    api_url: str = ""
    http_method: str = "POST"
    request_payload: Any = None


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection settings written into the generated mock server."""

    server: str = "localhost"
    database: str = ""
    user: str = ""
    password: str = ""
    port: int = 1433

    def as_connect_kwargs(self) -> dict[str, Any]:
        return {
            "server": self.server,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
        }


@dataclass(frozen=True)
class GenerationConfig:  # pylint: disable=too-many-instance-attributes
    """Top-level configuration aggregate for one generation call."""

    collection_name: str
    db_queries: tuple[QuerySpec, ...] = ()
    variable_generators: tuple[GeneratorSpec, ...] = ()
    scenarios: tuple[Scenario, ...] = ()
    csv_scenarios: tuple[CsvScenario, ...] = ()
    assertions: tuple[AssertionSpec, ...] = ()
    auth: AuthSpec = field(default_factory=AuthSpec)
    db_config: DatabaseSettings = field(default_factory=DatabaseSettings)
    api_target: ApiTarget = field(default_factory=ApiTarget)
    response_contract: ResponseContract = field(default_factory=ResponseContract)
