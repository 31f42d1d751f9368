"""Generation use case: configuration in, four artifact texts out."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from bruno_collection_generator.collection_assembly import assemble_collection
from bruno_collection_generator.configuration import GenerationConfig, load_configuration
from bruno_collection_generator.mock_server import REQUIREMENTS, plan_mock_server, render_flask_app

from .artifact_contracts import GeneratedArtifacts, GenerationOutcome, GenerationRequest
from .instructions_writer import build_setup_instructions

logger = logging.getLogger(__name__)


def package_artifacts(
    config: GenerationConfig, *, clock: Callable[[], datetime] = datetime.now
) -> GeneratedArtifacts:
    """Render the mock server, collection, requirements and instructions for `config`."""
    logger.info("Step 1: rendering mock server for %s", config.collection_name)
    app_source = render_flask_app(plan_mock_server(config))

    logger.info("Step 2: assembling collection document")
    document = assemble_collection(config, clock=clock)
    collection_json = json.dumps(document.to_dict(), indent=2)

    logger.info("Step 3: writing dependency manifest")
    requirements = "".join(f"{name}\n" for name in REQUIREMENTS)

    logger.info("Step 4: writing setup instructions")
    instructions = build_setup_instructions(config, clock=clock)

    return GeneratedArtifacts(
        collection_name=config.collection_name,
        app_source=app_source,
        collection_json=collection_json,
        requirements=requirements,
        instructions=instructions,
    )


def write_artifacts(artifacts: GeneratedArtifacts, output_dir: Path | str) -> tuple[Path, ...]:
    """Write every artifact under `output_dir`, creating it when missing.

    Raises:
      OSError: If the directory or a file cannot be written.
    """
    destination = Path(output_dir)
    destination.mkdir(parents=True, exist_ok=True)
    written = []
    for filename, content in artifacts.files():
        path = destination / filename
        path.write_text(content, encoding="utf-8")
        logger.info("Wrote %s", path)
        written.append(path.resolve())
    return tuple(written)


def generate_from_config_file(request: GenerationRequest) -> GenerationOutcome:
    """Load a configuration file, package its artifacts and write them to disk."""
    config = load_configuration(request.config_path)
    artifacts = package_artifacts(config)
    written = write_artifacts(artifacts, request.output_dir)
    return GenerationOutcome(
        output_dir=Path(request.output_dir).resolve(),
        written_paths=written,
        collection_name=config.collection_name,
    )
