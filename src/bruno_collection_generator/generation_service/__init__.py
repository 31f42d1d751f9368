"""Generation service domain exports."""

from .artifact_cache import ArtifactCache, ArtifactNotFoundError, CachedArtifacts
from .service_app import ServiceSettings, create_app, describe_duration, map_form_payload

__all__ = [
    "ArtifactCache",
    "ArtifactNotFoundError",
    "CachedArtifacts",
    "ServiceSettings",
    "create_app",
    "describe_duration",
    "map_form_payload",
]
