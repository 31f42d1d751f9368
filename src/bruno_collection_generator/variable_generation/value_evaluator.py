"""In-process evaluation of value programs."""

from __future__ import annotations

import random
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from .value_programs import (
    CaptureNow,
    DateToken,
    EpochMilliseconds,
    EpochSeconds,
    FormatMoment,
    IsoTimestamp,
    LayoutPart,
    Literal,
    NewUuid,
    RandomCharacters,
    RandomInteger,
    ShiftDays,
    ShiftDaysWhenDayAtLeast,
    StripHyphens,
    Truncate,
    ValueProgram,
)

Clock = Callable[[], datetime]


class ProgramStateError(RuntimeError):
    """Raised when a step needs a register that no earlier step filled."""


def evaluate_program(
    program: ValueProgram,
    *,
    clock: Clock = datetime.now,
    rng: random.Random | None = None,
) -> Any:
    """Run a value program and return the produced value.

    Args:
      program: Compiled generator program.
      clock: Returns the current local time, naive or aware. Injected for frozen-clock
        tests; UTC layouts convert it with ``astimezone``.
      rng: Random source. The rendered Python dialect consumes the same draws, so a
        seeded generator yields identical values in both.

    Returns:
      An ``int`` for random numbers, a ``str`` for everything else.
    """
    source = rng if rng is not None else random.Random()
    moment: datetime | None = None
    value: Any = None
    for step in program.steps:
        if isinstance(step, CaptureNow):
            moment = clock()
        elif isinstance(step, ShiftDays):
            moment = _require_moment(moment) + timedelta(days=step.days)
        elif isinstance(step, ShiftDaysWhenDayAtLeast):
            moment = _require_moment(moment)
            if moment.day >= step.threshold:
                moment = moment + timedelta(days=step.days)
        elif isinstance(step, FormatMoment):
            value = format_moment(_require_moment(moment), step.layout, utc=step.utc)
        elif isinstance(step, NewUuid):
            value = str(uuid.UUID(int=source.getrandbits(128), version=4))
        elif isinstance(step, StripHyphens):
            value = str(value).replace("-", "")
        elif isinstance(step, Truncate):
            value = str(value)[: step.length]
        elif isinstance(step, RandomInteger):
            value = source.randint(step.minimum, step.maximum)
        elif isinstance(step, RandomCharacters):
            value = "".join(source.choice(step.alphabet) for _ in range(step.length))
        elif isinstance(step, EpochSeconds):
            value = str(int(clock().timestamp()))
        elif isinstance(step, EpochMilliseconds):
            value = str(int(clock().timestamp() * 1000))
        elif isinstance(step, IsoTimestamp):
            value = iso_utc(clock())
        elif isinstance(step, Literal):
            value = step.value
    return value


def format_moment(moment: datetime, layout: tuple[LayoutPart, ...], *, utc: bool = False) -> str:
    if utc:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(strftime_pattern(layout))


def strftime_pattern(layout: tuple[LayoutPart, ...]) -> str:
    """Translate a moment layout into a ``strftime`` pattern."""
    parts = []
    for part in layout:
        if isinstance(part, DateToken):
            parts.append(_STRFTIME_DIRECTIVES[part])
        else:
            parts.append(part.replace("%", "%%"))
    return "".join(parts)


def iso_utc(moment: datetime) -> str:
    utc_moment = moment.astimezone(timezone.utc)
    return utc_moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _require_moment(moment: datetime | None) -> datetime:
    if moment is None:
        raise ProgramStateError("Moment register used before the clock was captured.")
    return moment


_STRFTIME_DIRECTIVES = {
    DateToken.YEAR: "%Y",
    DateToken.MONTH: "%m",
    DateToken.DAY: "%d",
    DateToken.HOUR: "%H",
    DateToken.MINUTE: "%M",
    DateToken.SECOND: "%S",
}
