"""Output packaging entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bruno_collection_generator.configuration.loader import sanitize_name

APP_FILENAME = "app.py"
REQUIREMENTS_FILENAME = "requirements.txt"
INSTRUCTIONS_FILENAME = "BRUNO_SETUP_INSTRUCTIONS.md"


class ArtifactKind(str, Enum):
    """Downloadable artifact identifiers."""

    COLLECTION = "collection"
    APP = "app"
    PACKAGE = "package"
    INSTRUCTIONS = "instructions"


@dataclass(frozen=True)
class GeneratedArtifacts:
    """The four texts produced by one generation call."""

    collection_name: str
    app_source: str
    collection_json: str
    requirements: str
    instructions: str

    @property
    def collection_filename(self) -> str:
        return f"{sanitize_name(self.collection_name)}.json"

    def file_for(self, kind: ArtifactKind) -> tuple[str, str]:
        """Return ``(filename, content)`` for one artifact kind."""
        if kind is ArtifactKind.COLLECTION:
            return self.collection_filename, self.collection_json
        if kind is ArtifactKind.APP:
            return APP_FILENAME, self.app_source
        if kind is ArtifactKind.PACKAGE:
            return REQUIREMENTS_FILENAME, self.requirements
        return INSTRUCTIONS_FILENAME, self.instructions

    def files(self) -> list[tuple[str, str]]:
        return [self.file_for(kind) for kind in ArtifactKind]


@dataclass(frozen=True)
class GenerationRequest:
    """Input contract for generating artifacts from a configuration file."""

    config_path: str
    output_dir: str


@dataclass(frozen=True)
class GenerationOutcome:
    """Output contract for one completed generation."""

    output_dir: Path
    written_paths: tuple[Path, ...]
    collection_name: str
