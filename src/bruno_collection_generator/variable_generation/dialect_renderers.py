"""Render value programs as Python or Bruno JavaScript statements.

The Python dialect runs inside the generated Flask mock server and expects the
names ``datetime``, ``timedelta``, ``timezone``, ``random``, ``uuid`` and
``logger`` in scope. It leaves its result in ``generated_value``.

The embedded dialect runs inside Bruno pre-request scripts, leaves its result
in ``generatedValue`` and writes it to the environment through ``bru.setEnvVar``.
"""

from __future__ import annotations

import json

from .value_evaluator import strftime_pattern
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
    ValueStep,
)

PYTHON_RESULT_NAME = "generated_value"
JS_RESULT_NAME = "generatedValue"

_JS_UUID_EXPRESSION = (
    "'xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx'.replace(/[xy]/g, function (c) {"
    " const r = Math.random() * 16 | 0;"
    " return (c === 'x' ? r : (r & 0x3 | 0x8)).toString(16); })"
)

_JS_DATE_PARTS = {
    DateToken.YEAR: "moment.getFullYear().toString()",
    DateToken.MONTH: "(moment.getMonth() + 1).toString().padStart(2, '0')",
    DateToken.DAY: "moment.getDate().toString().padStart(2, '0')",
    DateToken.HOUR: "moment.getHours().toString().padStart(2, '0')",
    DateToken.MINUTE: "moment.getMinutes().toString().padStart(2, '0')",
    DateToken.SECOND: "moment.getSeconds().toString().padStart(2, '0')",
}
_JS_UTC_DATE_PARTS = {
    token: expression.replace("moment.get", "moment.getUTC")
    for token, expression in _JS_DATE_PARTS.items()
}


def render_python(program: ValueProgram) -> list[str]:
    """Render the program as Python statements assigning ``generated_value``."""
    lines: list[str] = []
    if program.error:
        lines.append(f"logger.warning({program.error!r})")
    for step in program.steps:
        lines.extend(_python_step(step))
    return lines


def _python_step(step: ValueStep) -> list[str]:
    result = PYTHON_RESULT_NAME
    if isinstance(step, CaptureNow):
        return ["moment = datetime.now()"]
    if isinstance(step, ShiftDays):
        return [f"moment = moment + timedelta(days={step.days})"]
    if isinstance(step, ShiftDaysWhenDayAtLeast):
        return [
            f"if moment.day >= {step.threshold}:",
            f"    moment = moment + timedelta(days={step.days})",
        ]
    if isinstance(step, FormatMoment):
        source = "moment.astimezone(timezone.utc)" if step.utc else "moment"
        return [f"{result} = {source}.strftime({strftime_pattern(step.layout)!r})"]
    if isinstance(step, NewUuid):
        return [f"{result} = str(uuid.UUID(int=random.getrandbits(128), version=4))"]
    if isinstance(step, StripHyphens):
        return [f"{result} = {result}.replace('-', '')"]
    if isinstance(step, Truncate):
        return [f"{result} = {result}[:{step.length}]"]
    if isinstance(step, RandomInteger):
        return [f"{result} = random.randint({step.minimum}, {step.maximum})"]
    if isinstance(step, RandomCharacters):
        return [
            f"{result} = ''.join(random.choice({step.alphabet!r}) for _ in range({step.length}))"
        ]
    if isinstance(step, EpochSeconds):
        return [f"{result} = str(int(datetime.now().timestamp()))"]
    if isinstance(step, EpochMilliseconds):
        return [f"{result} = str(int(datetime.now().timestamp() * 1000))"]
    if isinstance(step, IsoTimestamp):
        return [
            f"{result} = datetime.now().astimezone(timezone.utc)"
            ".isoformat(timespec='milliseconds').replace('+00:00', 'Z')"
        ]
    if isinstance(step, Literal):
        return [f"{result} = {step.value!r}"]
    raise TypeError(f"Unsupported value step: {step!r}")


def render_bruno(program: ValueProgram, variable_name: str) -> list[str]:
    """Render the program as Bruno JavaScript that stores the value as `variable_name`.

    When the program preserves previous values, the current content of the
    variable is read and copied to ``prev<Name>`` before the new value is written.
    """
    name = json.dumps(variable_name)
    lines = [f"let {JS_RESULT_NAME};"]
    if program.error:
        lines.append(f"console.warn({json.dumps(program.error)});")
    for step in program.steps:
        lines.extend(_bruno_step(step))
    if program.preserve_previous:
        previous_slot = json.dumps(previous_slot_name(variable_name))
        lines.extend(
            [
                f"const previousValue = bru.getEnvVar({name});",
                "if (previousValue) {",
                f"    bru.setEnvVar({previous_slot}, previousValue);",
                "}",
            ]
        )
    lines.append(f"bru.setEnvVar({name}, {JS_RESULT_NAME});")
    label = json.dumps(f"Generated {variable_name}:")
    lines.append(f"console.log({label}, {JS_RESULT_NAME});")
    return lines


def previous_slot_name(variable_name: str) -> str:
    """Environment slot keeping the prior value of a correlation identifier."""
    if not variable_name:
        return "prev"
    return f"prev{variable_name[0].upper()}{variable_name[1:]}"


def _bruno_step(step: ValueStep) -> list[str]:
    result = JS_RESULT_NAME
    if isinstance(step, CaptureNow):
        return ["const moment = new Date();"]
    if isinstance(step, ShiftDays):
        return [f"moment.setDate(moment.getDate() + ({step.days}));"]
    if isinstance(step, ShiftDaysWhenDayAtLeast):
        return [
            f"if (moment.getDate() >= {step.threshold}) {{",
            f"    moment.setDate(moment.getDate() + ({step.days}));",
            "}",
        ]
    if isinstance(step, FormatMoment):
        return [f"{result} = {_js_layout(step.layout, utc=step.utc)};"]
    if isinstance(step, NewUuid):
        return [f"{result} = {_JS_UUID_EXPRESSION};"]
    if isinstance(step, StripHyphens):
        return [f"{result} = {result}.replace(/-/g, '');"]
    if isinstance(step, Truncate):
        return [f"{result} = {result}.substring(0, {step.length});"]
    if isinstance(step, RandomInteger):
        span = step.maximum - step.minimum + 1
        return [f"{result} = {step.minimum} + Math.floor(Math.random() * {span});"]
    if isinstance(step, RandomCharacters):
        return [
            f"const alphabet = {json.dumps(step.alphabet)};",
            f"{result} = '';",
            f"for (let i = 0; i < {step.length}; i++) {{",
            f"    {result} += alphabet.charAt(Math.floor(Math.random() * alphabet.length));",
            "}",
        ]
    if isinstance(step, EpochSeconds):
        return [f"{result} = Math.floor(Date.now() / 1000).toString();"]
    if isinstance(step, EpochMilliseconds):
        return [f"{result} = Date.now().toString();"]
    if isinstance(step, IsoTimestamp):
        return [f"{result} = new Date().toISOString();"]
    if isinstance(step, Literal):
        return [f"{result} = {json.dumps(step.value)};"]
    raise TypeError(f"Unsupported value step: {step!r}")


def _js_layout(layout: tuple[LayoutPart, ...], *, utc: bool = False) -> str:
    parts = _JS_UTC_DATE_PARTS if utc else _JS_DATE_PARTS
    pieces = [
        parts[part] if isinstance(part, DateToken) else json.dumps(part)
        for part in layout
    ]
    return " + ".join(pieces) if pieces else "''"
