"""Collection assembly domain exports."""

from .collection_models import (
    CollectionDocument,
    Environment,
    EnvironmentVariable,
    Folder,
    RequestItem,
    auth_settings,
)
from .document_assembler import (
    DATA_PREPARATION_FOLDER,
    NEGATIVE_FOLDER,
    POSITIVE_FOLDER,
    assemble_collection,
    environment_variables,
)
from .payload_mutation import corrupt_payload

__all__ = [
    "CollectionDocument",
    "Environment",
    "EnvironmentVariable",
    "Folder",
    "RequestItem",
    "auth_settings",
    "assemble_collection",
    "environment_variables",
    "DATA_PREPARATION_FOLDER",
    "POSITIVE_FOLDER",
    "NEGATIVE_FOLDER",
    "corrupt_payload",
]
