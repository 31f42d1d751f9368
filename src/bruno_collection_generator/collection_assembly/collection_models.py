"""Collection document entities and their Bruno JSON shape."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from bruno_collection_generator.configuration.generation_settings import AuthMode, AuthSpec

COLLECTION_VERSION = "1"
ENVIRONMENT_NAME = "DEV"
IGNORED_PATHS = ("node_modules", ".git")
INHERITED_AUTH: Mapping[str, Any] = {"mode": "inherit"}


def auth_settings(auth: AuthSpec | None) -> dict[str, Any]:
    """Bruno request auth block for the configured authentication."""
    if auth is None or auth.mode is AuthMode.NONE:
        return {"mode": "none"}
    if auth.mode is AuthMode.BASIC:
        return {
            "mode": "basic",
            "basic": {"username": auth.username or "", "password": auth.password or ""},
        }
    return {"mode": "bearer", "bearer": {"token": auth.token or ""}}


@dataclass(frozen=True)
class EnvironmentVariable:
    name: str
    value: str = ""
    secret: bool = False
    enabled: bool = True
    type: str = "text"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "secret": self.secret,
            "enabled": self.enabled,
            "type": self.type,
        }


@dataclass(frozen=True)
class RequestItem:  # pylint: disable=too-many-instance-attributes
    """One executable request of a folder."""

    name: str
    filename: str
    seq: int
    url: str
    method: str = "GET"
    body: str = ""
    pre_request_script: str = ""
    test_script: str = ""
    auth: Mapping[str, Any] = field(default_factory=lambda: dict(INHERITED_AUTH))
    docs: str = ""
    tags: tuple[str, ...] = ()

    @property
    def body_mode(self) -> str:
        return "json" if self.body else "none"

    def to_dict(self) -> dict[str, Any]:
        script = {"req": self.pre_request_script} if self.pre_request_script else {}
        return {
            "type": "http",
            "name": self.name,
            "filename": self.filename,
            "seq": self.seq,
            "settings": {"encodeUrl": True, "timeout": 0},
            "tags": list(self.tags),
            "request": {
                "url": self.url,
                "method": self.method,
                "headers": [],
                "params": [],
                "body": {
                    "mode": self.body_mode,
                    "json": self.body,
                    "formUrlEncoded": [],
                    "multipartForm": [],
                    "file": [],
                },
                "script": script,
                "vars": {},
                "assertions": [],
                "tests": self.test_script,
                "docs": self.docs,
                "auth": dict(self.auth),
            },
        }


@dataclass(frozen=True)
class Folder:
    name: str
    seq: int
    items: tuple[RequestItem, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "folder",
            "name": self.name,
            "filename": self.name,
            "seq": self.seq,
            "root": {
                "request": {"auth": dict(INHERITED_AUTH)},
                "meta": {"name": self.name, "seq": self.seq},
            },
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class Environment:
    name: str
    variables: tuple[EnvironmentVariable, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "variables": [variable.to_dict() for variable in self.variables],
            "name": self.name,
        }


@dataclass(frozen=True)
class CollectionDocument:
    """Assembled three-folder collection, never mutated after assembly."""

    name: str
    folders: tuple[Folder, ...]
    environments: tuple[Environment, ...]
    version: str = COLLECTION_VERSION

    @property
    def environment_uid(self) -> str:
        return uuid.uuid5(uuid.NAMESPACE_URL, f"bruno-collection:{self.name}").hex

    def folder(self, name: str) -> Folder:
        for folder in self.folders:
            if folder.name == name:
                return folder
        raise KeyError(name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "items": [folder.to_dict() for folder in self.folders],
            "activeEnvironmentUid": self.environment_uid,
            "environments": [environment.to_dict() for environment in self.environments],
            "brunoConfig": {
                "version": self.version,
                "name": self.name,
                "type": "collection",
                "ignore": list(IGNORED_PATHS),
            },
        }
