"""Boundary tests for generation domain internal dependencies."""

from __future__ import annotations

from pathlib import Path


def _package_dir() -> Path:
    return Path(__file__).resolve().parents[3] / "src" / "bruno_collection_generator"


def _assert_no_imports(domain: str, forbidden: tuple[str, ...]) -> None:
    for module_path in sorted((_package_dir() / domain).glob("*.py")):
        text = module_path.read_text(encoding="utf-8")
        for fragment in forbidden:
            assert fragment not in text, f"Forbidden dependency in {module_path}: {fragment}"


def test_value_programs_do_not_depend_on_output_domains() -> None:
    _assert_no_imports(
        "variable_generation",
        (
            "bruno_collection_generator.mock_server",
            "bruno_collection_generator.collection_assembly",
            "bruno_collection_generator.test_scripts",
            "bruno_collection_generator.output_packaging",
        ),
    )


def test_mock_server_does_not_depend_on_collection_document() -> None:
    _assert_no_imports(
        "mock_server",
        (
            "bruno_collection_generator.collection_assembly",
            "bruno_collection_generator.test_scripts",
        ),
    )


def test_test_scripts_do_not_depend_on_generated_server() -> None:
    _assert_no_imports(
        "test_scripts",
        (
            "bruno_collection_generator.mock_server",
            "bruno_collection_generator.variable_generation",
        ),
    )
