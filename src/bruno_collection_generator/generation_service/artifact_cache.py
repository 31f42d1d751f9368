"""In-memory store of generated artifacts with per-entry expiry."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from bruno_collection_generator.output_packaging import GeneratedArtifacts

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600.0
DEFAULT_SWEEP_SECONDS = 1800.0


class ArtifactNotFoundError(KeyError):
    """Raised when an artifact id is unknown or its entry expired."""


@dataclass(frozen=True)
class CachedArtifacts:
    artifacts: GeneratedArtifacts
    created_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        return now >= self.created_at + self.ttl_seconds

    def remaining_seconds(self, now: float) -> float:
        return max(0.0, self.created_at + self.ttl_seconds - now)


class ArtifactCache:
    """Thread-safe keyed store; expired entries vanish on read and on sweep.

    Args:
      ttl_seconds: Lifetime of each entry.
      sweep_seconds: Interval of the background sweep started by `start_sweeper`.
      clock: Returns the current time in seconds. Injected for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        sweep_seconds: float = DEFAULT_SWEEP_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.sweep_seconds = sweep_seconds
        self._clock = clock
        self._entries: dict[str, CachedArtifacts] = {}
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._stopped = threading.Event()

    def put(self, artifacts: GeneratedArtifacts) -> str:
        """Store artifacts under a fresh random 32-character hex id."""
        entry = CachedArtifacts(artifacts, self._clock(), self.ttl_seconds)
        with self._lock:
            artifact_id = secrets.token_hex(16)
            while artifact_id in self._entries:
                artifact_id = secrets.token_hex(16)
            self._entries[artifact_id] = entry
            size = len(self._entries)
        logger.info("Stored %s as %s (%s in memory)", artifacts.collection_name, artifact_id, size)
        return artifact_id

    def get(self, artifact_id: str) -> CachedArtifacts:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(artifact_id)
            if entry is not None and entry.is_expired(now):
                del self._entries[artifact_id]
                entry = None
        if entry is None:
            raise ArtifactNotFoundError(artifact_id)
        return entry

    def delete(self, artifact_id: str) -> GeneratedArtifacts:
        entry = self.get(artifact_id)
        with self._lock:
            self._entries.pop(artifact_id, None)
        logger.info("Deleted %s (%s)", entry.artifacts.collection_name, artifact_id)
        return entry.artifacts

    def cleanup_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        for key in expired:
            logger.info("Cleaning up expired collection %s", key)
        return len(expired)

    def now(self) -> float:
        return self._clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def start_sweeper(self) -> None:
        """Run `cleanup_expired` every `sweep_seconds` on a daemon timer."""
        self._stopped.clear()
        self._schedule()

    def stop_sweeper(self) -> None:
        self._stopped.set()
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _schedule(self) -> None:
        if self._stopped.is_set():
            return
        timer = threading.Timer(self.sweep_seconds, self._sweep)
        timer.daemon = True
        with self._lock:
            self._timer = timer
        timer.start()

    def _sweep(self) -> None:
        try:
            self.cleanup_expired()
        finally:
            self._schedule()
