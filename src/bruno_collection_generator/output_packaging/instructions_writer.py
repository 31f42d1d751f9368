"""Markdown setup instructions for a generated bundle."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from bruno_collection_generator.collection_assembly import environment_variables
from bruno_collection_generator.configuration.generation_settings import GenerationConfig
from bruno_collection_generator.configuration.loader import sanitize_name
from bruno_collection_generator.mock_server import TEST_SUITE_PATH

from .artifact_contracts import APP_FILENAME, INSTRUCTIONS_FILENAME, REQUIREMENTS_FILENAME


def build_setup_instructions(
    config: GenerationConfig, *, clock: Callable[[], datetime] = datetime.now
) -> str:
    """Render setup commands, mock endpoints and environment variables as Markdown."""
    collection_file = f"{sanitize_name(config.collection_name)}.json"
    sections = [
        f"# {config.collection_name}: Bruno collection setup",
        "",
        "## Generated files",
        "",
        f"- `{APP_FILENAME}`: Flask mock data server with every database endpoint",
        f"- `{collection_file}`: Bruno collection",
        f"- `{REQUIREMENTS_FILENAME}`: Python dependencies of the mock server",
        f"- `{INSTRUCTIONS_FILENAME}`: this guide",
        "",
        "## Setup",
        "",
        "1. Create a virtual environment and install the dependencies:",
        "",
        "   ```bash",
        "   python -m venv .venv",
        "   .venv/bin/python -m pip install -r requirements.txt",
        "   ```",
        "",
        "   `bruno-collection-generator bootstrap --output-dir .` does the same.",
        "",
        "2. Start the mock data server (port 3000, override with `PORT`):",
        "",
        "   ```bash",
        f"   .venv/bin/python {APP_FILENAME}",
        "   ```",
        "",
        "3. Install the Bruno CLI if needed: `npm install -g @usebruno/cli`.",
        f"4. Import `{collection_file}` into Bruno and select the `DEV` environment.",
        "",
        "## Running the collection",
        "",
        "```bash",
        f'bruno run "{sanitize_name(config.collection_name)}" --env DEV',
        "```",
        "",
        "Run the folders in order: DataPreparation, Positive Scenarios, Negative Scenarios.",
        "",
        "## Mock server endpoints",
        "",
        "- `GET http://localhost:3000/health`",
    ]
    for query in config.db_queries:
        description = query.description or "Database query endpoint"
        sections.append(
            f"- `{query.http_method} http://localhost:3000{query.endpoint}`: {description}"
        )
    for spec in config.variable_generators:
        sections.append(f"- `GET http://localhost:3000/generate/{spec.name}`: {spec.kind} value")
    if config.csv_scenarios:
        sections.append(
            f"- `POST http://localhost:3000{TEST_SUITE_PATH}`: runs "
            f"{len(config.csv_scenarios)} CSV scenarios with unique variables"
        )
    sections.extend(["", "## Environment variables", ""])
    for variable in environment_variables(config, clock=clock):
        default = f" (default `{variable.value}`)" if variable.value else ""
        sections.append(f"- `{variable.name}`{default}")
    sections.append("")
    return "\n".join(sections)
