"""Turn generator specs into runtime or embedded script fragments."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from bruno_collection_generator.configuration.generation_settings import GeneratorSpec

from .dialect_renderers import render_bruno, render_python
from .value_programs import build_value_program


class ScriptDialect(str, Enum):
    """Targets a generator fragment can be rendered for."""

    RUNTIME = "runtime"
    EMBEDDED = "embedded"


@dataclass(frozen=True)
class ScriptFragment:
    """Rendered statements for one generator, without surrounding indentation."""

    variable_name: str
    kind: str
    dialect: ScriptDialect
    lines: tuple[str, ...]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def synthesize(spec: GeneratorSpec, dialect: ScriptDialect) -> ScriptFragment:
    """Render one generator in the requested dialect.

    The runtime fragment leaves the value in ``generated_value``; the embedded
    fragment stores it in the environment variable named after the generator.
    """
    program = build_value_program(spec)
    if dialect is ScriptDialect.RUNTIME:
        lines = render_python(program)
    else:
        lines = [f"// Generate {spec.name} ({spec.kind})", *render_bruno(program, spec.name)]
    return ScriptFragment(
        variable_name=spec.name, kind=spec.kind, dialect=dialect, lines=tuple(lines)
    )


def unique_variable_name(generator_name: str, run_index: int) -> str:
    return f"{generator_name}_{run_index}"


def unique_bindings(generators: Sequence[GeneratorSpec], run_index: int) -> str:
    """Embedded pre-request script binding every generator to ``<name>_<run_index>``.

    Each generator runs in its own block so local names do not collide.
    """
    lines = [f"// Unique variables for CSV scenario run {run_index}"]
    for spec in generators:
        program = build_value_program(spec)
        lines.append("{")
        for line in render_bruno(program, unique_variable_name(spec.name, run_index)):
            lines.append(f"    {line}")
        lines.append("}")
    return "\n".join(lines)
