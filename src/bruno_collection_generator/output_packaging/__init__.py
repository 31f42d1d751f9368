"""Output packaging domain exports."""

from .artifact_contracts import (
    APP_FILENAME,
    INSTRUCTIONS_FILENAME,
    REQUIREMENTS_FILENAME,
    ArtifactKind,
    GeneratedArtifacts,
    GenerationOutcome,
    GenerationRequest,
)
from .artifact_packager import generate_from_config_file, package_artifacts, write_artifacts
from .instructions_writer import build_setup_instructions

__all__ = [
    "APP_FILENAME",
    "INSTRUCTIONS_FILENAME",
    "REQUIREMENTS_FILENAME",
    "ArtifactKind",
    "GeneratedArtifacts",
    "GenerationOutcome",
    "GenerationRequest",
    "build_setup_instructions",
    "generate_from_config_file",
    "package_artifacts",
    "write_artifacts",
]
