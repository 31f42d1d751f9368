"""Test script domain exports."""

from .script_statements import (
    CaptureToEnv,
    CheckBlock,
    Comment,
    Expectation,
    LogValues,
    ParseBody,
    Ref,
    Statement,
    StoreFieldToEnv,
    js_ref,
    render_script,
)
from .script_synthesis import (
    TRANSACTION_REF_VARIABLE,
    csv_scenario_statements,
    custom_assertion_statements,
    data_preparation_statements,
    failure_lookup_statements,
    generator_probe_statements,
    negative_statements,
    positive_statements,
    scenario_statements,
)

__all__ = [
    "CaptureToEnv",
    "Comment",
    "Expectation",
    "LogValues",
    "ParseBody",
    "Ref",
    "Statement",
    "StoreFieldToEnv",
    "CheckBlock",
    "js_ref",
    "render_script",
    "TRANSACTION_REF_VARIABLE",
    "data_preparation_statements",
    "positive_statements",
    "negative_statements",
    "custom_assertion_statements",
    "failure_lookup_statements",
    "generator_probe_statements",
    "scenario_statements",
    "csv_scenario_statements",
]
