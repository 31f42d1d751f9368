"""Variable generation domain exports."""

from .dialect_renderers import previous_slot_name, render_bruno, render_python
from .synthesizer import (
    ScriptDialect,
    ScriptFragment,
    synthesize,
    unique_bindings,
    unique_variable_name,
)
from .value_evaluator import ProgramStateError, evaluate_program
from .value_programs import (
    UNKNOWN_TYPE_SENTINEL,
    UNSUPPORTED_CONDITION_SENTINEL,
    ValueProgram,
    build_value_program,
)

__all__ = [
    "ScriptDialect",
    "ScriptFragment",
    "synthesize",
    "unique_bindings",
    "unique_variable_name",
    "ValueProgram",
    "build_value_program",
    "evaluate_program",
    "ProgramStateError",
    "render_python",
    "render_bruno",
    "previous_slot_name",
    "UNKNOWN_TYPE_SENTINEL",
    "UNSUPPORTED_CONDITION_SENTINEL",
]
