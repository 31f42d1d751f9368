"""Dialect-neutral value programs for variable generators.

Every generator kind compiles to a short tuple of steps operating on two
registers: a captured local ``moment`` and the ``value`` being produced.
Renderers turn the same program into Python or Bruno JavaScript, so date
arithmetic and format tables live here only once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from bruno_collection_generator.configuration.generation_settings import (
    GeneratorKind,
    GeneratorSpec,
)

logger = logging.getLogger(__name__)

UNKNOWN_TYPE_SENTINEL = "ERROR_UNKNOWN_TYPE"
UNSUPPORTED_CONDITION_SENTINEL = "ERROR_UNSUPPORTED_CONDITION"

DEFAULT_OFFSET_DAYS = -30
DEFAULT_RANDOM_MIN = 1000
DEFAULT_RANDOM_MAX = 9999
DEFAULT_STRING_LENGTH = 8
END_OF_MONTH_THRESHOLD = 28
END_OF_MONTH_SHIFT = -3
SHORT_ID_LENGTH = 8

CHARSETS = {
    "alphanumeric": "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789",
    "alphabetic": "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
    "numeric": "0123456789",
}


class DateToken(str, Enum):
    """Zero-padded calendar components usable in a moment layout."""

    YEAR = "yyyy"
    MONTH = "MM"
    DAY = "dd"
    HOUR = "HH"
    MINUTE = "mm"
    SECOND = "ss"


LayoutPart = Union[DateToken, str]

_Y, _M, _D = DateToken.YEAR, DateToken.MONTH, DateToken.DAY
_H, _MIN, _S = DateToken.HOUR, DateToken.MINUTE, DateToken.SECOND

ISO_DATE_LAYOUT: tuple[LayoutPart, ...] = (_Y, "-", _M, "-", _D)
SPACED_DATE_TIME_LAYOUT: tuple[LayoutPart, ...] = (
    *ISO_DATE_LAYOUT,
    " ",
    _H,
    ":",
    _MIN,
    ":",
    _S,
)
ISO_DATE_TIME_LAYOUT: tuple[LayoutPart, ...] = (*ISO_DATE_LAYOUT, "T", _H, ":", _MIN, ":", _S)


@dataclass(frozen=True)
class CaptureNow:
    """Store the current local time in the moment register."""


@dataclass(frozen=True)
class ShiftDays:
    days: int


@dataclass(frozen=True)
class ShiftDaysWhenDayAtLeast:
    """Shift the moment by `days` when its day of month is at least `threshold`."""

    threshold: int
    days: int


@dataclass(frozen=True)
class FormatMoment:
    """Render the moment through `layout`, converted to UTC first when `utc` is set."""

    layout: tuple[LayoutPart, ...]
    utc: bool = False


# Layouts derived from the ISO rendering are UTC; the others use local time.
DATE_FORMATS: dict[str, FormatMoment] = {
    "MMddyyyy": FormatMoment((_M, _D, _Y)),
    "yyyy-MM-dd": FormatMoment(ISO_DATE_LAYOUT),
    "dd/MM/yyyy": FormatMoment((_D, "/", _M, "/", _Y)),
    "yyyyMMdd": FormatMoment((_Y, _M, _D)),
}
DATE_TIME_FORMATS: dict[str, FormatMoment] = {
    "yyyy-MM-dd HH:mm:ss": FormatMoment(SPACED_DATE_TIME_LAYOUT),
    "yyyy-MM-dd'T'HH:mm:ss": FormatMoment(ISO_DATE_TIME_LAYOUT, utc=True),
}
FALLBACK_DATE_FORMAT = FormatMoment(ISO_DATE_LAYOUT, utc=True)
FALLBACK_DATE_TIME_FORMAT = FormatMoment(SPACED_DATE_TIME_LAYOUT, utc=True)


@dataclass(frozen=True)
class NewUuid:
    """Version-4 UUID in canonical hyphenated form."""


@dataclass(frozen=True)
class StripHyphens:
    pass


@dataclass(frozen=True)
class Truncate:
    length: int


@dataclass(frozen=True)
class RandomInteger:
    minimum: int
    maximum: int


@dataclass(frozen=True)
class RandomCharacters:
    alphabet: str
    length: int


@dataclass(frozen=True)
class EpochSeconds:
    pass


@dataclass(frozen=True)
class EpochMilliseconds:
    pass


@dataclass(frozen=True)
class IsoTimestamp:
    """UTC ISO-8601 timestamp with milliseconds and a trailing ``Z``."""


@dataclass(frozen=True)
class Literal:
    value: str


ValueStep = Union[
    CaptureNow,
    ShiftDays,
    ShiftDaysWhenDayAtLeast,
    FormatMoment,
    NewUuid,
    StripHyphens,
    Truncate,
    RandomInteger,
    RandomCharacters,
    EpochSeconds,
    EpochMilliseconds,
    IsoTimestamp,
    Literal,
]


@dataclass(frozen=True)
class ValueProgram:
    """Compiled steps for one generator plus binding hints."""

    kind: str
    steps: tuple[ValueStep, ...]
    preserve_previous: bool = False
    error: str | None = None


def build_value_program(spec: GeneratorSpec) -> ValueProgram:
    """Compile a generator spec into its value program.

    Never raises: unknown kinds and unsupported conditions produce a literal
    sentinel value and carry an error message for the renderers to report.
    """
    builder = _BUILDERS.get(spec.kind)
    if builder is None:
        message = f"Unknown generator type: {spec.kind}"
        logger.warning("%s (variable %s)", message, spec.name)
        return ValueProgram(
            kind=spec.kind, steps=(Literal(UNKNOWN_TYPE_SENTINEL),), error=message
        )
    return builder(spec)


def _current_date(spec: GeneratorSpec) -> ValueProgram:
    step = DATE_FORMATS.get(spec.parameter("format", "MMddyyyy"), FALLBACK_DATE_FORMAT)
    return ValueProgram(kind=spec.kind, steps=(CaptureNow(), step))


def _current_date_time(spec: GeneratorSpec) -> ValueProgram:
    step = DATE_TIME_FORMATS.get(
        spec.parameter("format", "yyyy-MM-dd HH:mm:ss"), FALLBACK_DATE_TIME_FORMAT
    )
    return ValueProgram(kind=spec.kind, steps=(CaptureNow(), step))


def _future_past_date(spec: GeneratorSpec) -> ValueProgram:
    offset = _int_parameter(spec, "offset", DEFAULT_OFFSET_DAYS)
    step = DATE_FORMATS.get(spec.parameter("format", "yyyy-MM-dd"), FALLBACK_DATE_FORMAT)
    return ValueProgram(kind=spec.kind, steps=(CaptureNow(), ShiftDays(offset), step))


def _conditional_date(spec: GeneratorSpec) -> ValueProgram:
    condition = spec.parameter("condition", "endOfMonth")
    if condition != "endOfMonth":
        message = f"Unsupported conditionalDate condition: {condition}"
        logger.warning("%s (variable %s)", message, spec.name)
        return ValueProgram(
            kind=spec.kind, steps=(Literal(UNSUPPORTED_CONDITION_SENTINEL),), error=message
        )
    return ValueProgram(
        kind=spec.kind,
        steps=(
            CaptureNow(),
            ShiftDaysWhenDayAtLeast(END_OF_MONTH_THRESHOLD, END_OF_MONTH_SHIFT),
            FormatMoment(ISO_DATE_LAYOUT),
        ),
    )


def _correlation_id(spec: GeneratorSpec) -> ValueProgram:
    id_format = spec.parameter("format", "full")
    steps: tuple[ValueStep, ...] = (NewUuid(),)
    if id_format == "compact":
        steps += (StripHyphens(),)
    elif id_format == "short":
        steps += (StripHyphens(), Truncate(SHORT_ID_LENGTH))
    return ValueProgram(kind=spec.kind, steps=steps, preserve_previous=True)


def _random_number(spec: GeneratorSpec) -> ValueProgram:
    minimum = _int_parameter(spec, "min", DEFAULT_RANDOM_MIN)
    maximum = _int_parameter(spec, "max", DEFAULT_RANDOM_MAX)
    return ValueProgram(kind=spec.kind, steps=(RandomInteger(minimum, maximum),))


def _random_string(spec: GeneratorSpec) -> ValueProgram:
    length = _int_parameter(spec, "length", DEFAULT_STRING_LENGTH)
    alphabet = CHARSETS.get(spec.parameter("charset", "alphanumeric"), CHARSETS["alphanumeric"])
    return ValueProgram(kind=spec.kind, steps=(RandomCharacters(alphabet, length),))


def _timestamp(spec: GeneratorSpec) -> ValueProgram:
    timestamp_format = spec.parameter("format", "iso")
    step: ValueStep
    if timestamp_format == "unix":
        step = EpochSeconds()
    elif timestamp_format == "unixMs":
        step = EpochMilliseconds()
    else:
        step = IsoTimestamp()
    return ValueProgram(kind=spec.kind, steps=(step,))


def _int_parameter(spec: GeneratorSpec, key: str, default: int) -> int:
    raw: Any = spec.parameter(key)
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


_BUILDERS = {
    GeneratorKind.CURRENT_DATE.value: _current_date,
    GeneratorKind.CURRENT_DATE_TIME.value: _current_date_time,
    GeneratorKind.FUTURE_PAST_DATE.value: _future_past_date,
    GeneratorKind.CONDITIONAL_DATE.value: _conditional_date,
    GeneratorKind.CORRELATION_ID.value: _correlation_id,
    GeneratorKind.RANDOM_NUMBER.value: _random_number,
    GeneratorKind.RANDOM_STRING.value: _random_string,
    GeneratorKind.TIMESTAMP.value: _timestamp,
}
