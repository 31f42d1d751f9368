"""FastAPI service that generates bundles for the browser form and serves downloads."""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from importlib import metadata
from typing import Any

from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from bruno_collection_generator.configuration import ConfigurationError, parse_configuration
from bruno_collection_generator.output_packaging import ArtifactKind, package_artifacts

from .artifact_cache import (
    DEFAULT_SWEEP_SECONDS,
    DEFAULT_TTL_SECONDS,
    ArtifactCache,
    ArtifactNotFoundError,
)

logger = logging.getLogger(__name__)

PACKAGE_NAME = "bruno-collection-generator"
ALL_FILES = "all"

_CONTENT_TYPES = {
    ArtifactKind.COLLECTION: "application/json; charset=utf-8",
    ArtifactKind.APP: "text/x-python; charset=utf-8",
    ArtifactKind.PACKAGE: "text/plain; charset=utf-8",
    ArtifactKind.INSTRUCTIONS: "text/markdown; charset=utf-8",
}
_CREDENTIALS_IN_URL = re.compile(r"//.*@")


@dataclass(frozen=True)
class ServiceSettings:
    """Network and cache knobs of the generation service."""

    host: str = "127.0.0.1"
    port: int = 3001
    ttl_seconds: float = DEFAULT_TTL_SECONDS
    sweep_seconds: float = DEFAULT_SWEEP_SECONDS
    allowed_origins: tuple[str, ...] = ("*",)


def map_form_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Translate the browser form payload into a generation configuration document."""
    document = dict(payload)
    if "dataQueries" in payload and "dbQueries" not in payload:
        document["dbQueries"] = payload.get("dataQueries") or []
    if "auth" not in payload:
        auth_type = payload.get("authType")
        if payload.get("basicAuth") or payload.get("bearerToken"):
            document["auth"] = {
                "type": auth_type or ("basic" if payload.get("basicAuth") else "bearer"),
                "basicAuth": payload.get("basicAuth"),
                "bearerToken": payload.get("bearerToken"),
            }
        else:
            document["auth"] = None
    return document


def describe_duration(seconds: float) -> str:
    minutes = int(seconds // 60)
    if minutes >= 60 and minutes % 60 == 0:
        hours = minutes // 60
        return "1 hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minutes"


def create_app(
    settings: ServiceSettings | None = None, cache: ArtifactCache | None = None
) -> FastAPI:
    """Build the generation service.

    Args:
      settings: Service knobs; defaults match the browser form's expectations.
      cache: Artifact store; a new one honouring `settings` is created when omitted.

    Returns:
      The FastAPI application. The periodic cache sweep runs for the lifetime of
      the application.
    """
    resolved = settings or ServiceSettings()
    store = (
        cache
        if cache is not None
        else ArtifactCache(ttl_seconds=resolved.ttl_seconds, sweep_seconds=resolved.sweep_seconds)
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        store.start_sweeper()
        try:
            yield
        finally:
            store.stop_sweeper()

    app = FastAPI(title="Bruno Collection Generator", lifespan=lifespan)
    app.state.cache = store

    @app.exception_handler(Exception)
    async def unexpected_error(_: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected service failure")
        return _failure(500, str(exc))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(resolved.allowed_origins),
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["Content-Disposition", "Content-Type", "Content-Length"],
    )

    @app.post("/api/generate")
    def generate(payload: dict[str, Any] = Body(...)) -> Any:
        try:
            config = parse_configuration(map_form_payload(payload))
        except ConfigurationError as exc:
            logger.warning("Rejected generation request: %s", exc)
            return _failure(400, str(exc))
        logger.info("Generating collection %s", config.collection_name)
        artifacts = package_artifacts(config)
        collection_id = store.put(artifacts)
        return {
            "success": True,
            "message": "Collection generated successfully",
            "collectionId": collection_id,
            "collectionName": config.collection_name,
            "expiresIn": describe_duration(store.ttl_seconds),
            "downloadUrl": f"/api/download/{collection_id}",
        }

    @app.get("/api/download/{collection_id}/{file_type}")
    def download(collection_id: str, file_type: str) -> Any:
        try:
            artifacts = store.get(collection_id).artifacts
        except ArtifactNotFoundError:
            return _failure(404, "Collection not found or expired")
        if file_type == ALL_FILES:
            return {"success": True, "files": dict(artifacts.files())}
        try:
            kind = ArtifactKind(file_type)
        except ValueError:
            return _failure(400, "Invalid file type")
        filename, content = artifacts.file_for(kind)
        logger.info("Downloaded %s for collection %s", filename, collection_id)
        return Response(
            content=content,
            media_type=_CONTENT_TYPES[kind],
            headers={
                "Content-Disposition": f'attachment; filename="{filename}"',
                "Cache-Control": "no-cache",
                "X-Content-Type-Options": "nosniff",
            },
        )

    @app.delete("/api/collection/{collection_id}")
    def delete_collection(collection_id: str) -> Any:
        try:
            store.delete(collection_id)
        except ArtifactNotFoundError:
            return _failure(404, "Collection not found")
        return {"success": True, "message": "Collection deleted successfully"}

    @app.get("/api/collection/{collection_id}/info")
    def collection_info(collection_id: str) -> Any:
        try:
            entry = store.get(collection_id)
        except ArtifactNotFoundError:
            return _failure(404, "Collection not found or expired")
        created_at = datetime.fromtimestamp(entry.created_at, tz=timezone.utc)
        return {
            "success": True,
            "collectionName": entry.artifacts.collection_name,
            "createdAt": created_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "expiresIn": f"{int(entry.remaining_seconds(store.now()) // 60)} minutes",
            "filesAvailable": [kind.value for kind in ArtifactKind],
        }

    @app.post("/api/test-db-connection")
    def test_db_connection(payload: dict[str, Any] = Body(...)) -> Any:
        jdbc_url = str(payload.get("jdbcUrl") or "")
        username = payload.get("username")
        if not jdbc_url.startswith("jdbc:"):
            return {"success": False, "error": 'Invalid JDBC URL format. Must start with "jdbc:"'}
        if not username or not payload.get("password"):
            return {"success": False, "error": "Username and password are required"}
        masked_url = _CREDENTIALS_IN_URL.sub("//***:***@", jdbc_url)
        logger.info("Simulated database connection test for %s", masked_url)
        return {
            "success": True,
            "message": "Database connection test successful",
            "connectionInfo": {
                "url": masked_url,
                "username": username,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        }

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        return {
            "status": "running",
            "message": "Bruno Collection Generator service",
            "version": _package_version(),
            "collectionsInMemory": len(store),
            "cleanupInterval": describe_duration(store.sweep_seconds),
            "collectionTTL": describe_duration(store.ttl_seconds),
        }

    return app


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _package_version() -> str:
    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return "0+unknown"
