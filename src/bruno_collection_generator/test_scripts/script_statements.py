"""Statement representation of Bruno test scripts and its JavaScript renderer."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Union

INDENT = "    "
_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


@dataclass(frozen=True)
class Ref:
    """JavaScript value reached from `root` through `path` property lookups."""

    root: str
    path: tuple[str, ...] = ()

    def child(self, *segments: str) -> Ref:
        return Ref(self.root, self.path + segments)


@dataclass(frozen=True)
class Expectation:
    """``expect(subject).to.<chain>`` with an optional call argument.

    When `argument` is None the chain is a property assertion such as ``exist``.
    """

    subject: Ref
    chain: str
    argument: Any = None


@dataclass(frozen=True)
class Comment:
    text: str


@dataclass(frozen=True)
class ParseBody:
    variable: str


@dataclass(frozen=True)
class CaptureToEnv:
    """Copy a nested value into an environment variable when every hop exists."""

    source: Ref
    env_name: str
    label: str


@dataclass(frozen=True)
class StoreFieldToEnv:
    """Store `field` of the body, or of its first row when the body is an array."""

    body: str
    field: str
    env_name: str


@dataclass(frozen=True)
class LogValues:
    arguments: tuple[Any, ...]


@dataclass(frozen=True)
class CheckBlock:
    """One independent ``test(...)`` call so failures do not short-circuit."""

    title: str
    expectations: tuple[Expectation, ...] = ()
    logs: tuple[LogValues, ...] = ()
    note: str | None = None


Statement = Union[Comment, ParseBody, CaptureToEnv, StoreFieldToEnv, LogValues, CheckBlock]


def js_ref(ref: Ref) -> str:
    """Render a property chain, using bracket access for non-identifier keys."""
    text = ref.root
    for segment in ref.path:
        if _IDENTIFIER.match(segment):
            text += f".{segment}"
        else:
            text += f"[{json.dumps(segment)}]"
    return text


def render_script(statements: tuple[Statement, ...] | list[Statement]) -> str:
    blocks: list[str] = []
    previous: Statement | None = None
    for statement in statements:
        rendered = "\n".join(_render_statement(statement))
        if isinstance(previous, Comment) and blocks:
            blocks[-1] = f"{blocks[-1]}\n{rendered}"
        else:
            blocks.append(rendered)
        previous = statement
    return "\n\n".join(blocks)


def _render_statement(statement: Statement) -> list[str]:
    if isinstance(statement, Comment):
        return [f"// {line}" for line in statement.text.splitlines() or [""]]
    if isinstance(statement, ParseBody):
        return [f"let {statement.variable} = res.getBody();"]
    if isinstance(statement, CaptureToEnv):
        return _render_capture(statement)
    if isinstance(statement, StoreFieldToEnv):
        return _render_store(statement)
    if isinstance(statement, LogValues):
        return [_render_log(statement)]
    if isinstance(statement, CheckBlock):
        return _render_test(statement)
    raise TypeError(f"Unsupported script statement: {statement!r}")


def _render_capture(statement: CaptureToEnv) -> list[str]:
    source = statement.source
    hops = [
        js_ref(Ref(source.root, source.path[:depth])) for depth in range(len(source.path) + 1)
    ]
    env_name = json.dumps(statement.env_name)
    return [
        f"if ({' && '.join(hops)}) {{",
        f"{INDENT}let captured = {js_ref(statement.source)};",
        f"{INDENT}bru.setEnvVar({env_name}, captured);",
        f"{INDENT}console.log({json.dumps(statement.label + ' saved:')}, captured);",
        "}",
    ]


def _render_store(statement: StoreFieldToEnv) -> list[str]:
    body = statement.body
    field = js_ref(Ref("record", (statement.field,)))
    env_name = json.dumps(statement.env_name)
    return [
        f"let record = Array.isArray({body}) ? {body}[0] : {body};",
        f"if (record && {field} !== undefined) {{",
        f"{INDENT}bru.setEnvVar({env_name}, {field});",
        f"{INDENT}console.log({json.dumps(statement.env_name + ' stored as:')}, {field});",
        "}",
    ]


def _render_log(statement: LogValues) -> str:
    arguments = ", ".join(
        js_ref(argument) if isinstance(argument, Ref) else json.dumps(argument)
        for argument in statement.arguments
    )
    return f"console.log({arguments});"


def _render_test(block: CheckBlock) -> list[str]:
    lines = [f"test({json.dumps(block.title)}, function () {{"]
    if block.note:
        lines.extend(f"{INDENT}// {line}" for line in block.note.splitlines())
    for expectation in block.expectations:
        lines.append(f"{INDENT}{_render_expectation(expectation)}")
    for log in block.logs:
        lines.append(f"{INDENT}{_render_log(log)}")
    lines.append("});")
    return lines


def _render_expectation(expectation: Expectation) -> str:
    subject = js_ref(expectation.subject)
    if expectation.argument is None:
        return f"expect({subject}).to.{expectation.chain};"
    return f"expect({subject}).to.{expectation.chain}({json.dumps(expectation.argument)});"
