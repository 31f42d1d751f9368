"""Negative-case payload mutation."""

from __future__ import annotations

import copy
from collections.abc import Mapping, MutableMapping
from typing import Any

DEFAULT_REFERENCE_PATH = ("TXLife", "TXLifeRequest", "TransRefGUID")
DEFAULT_SENTINEL = "INVALID_ID"


def corrupt_payload(
    payload: Any,
    path: tuple[str, ...] = DEFAULT_REFERENCE_PATH,
    sentinel: str = DEFAULT_SENTINEL,
) -> Any:
    """Return a copy of `payload` whose value at `path` is replaced by `sentinel`.

    ``None`` stays ``None``. The input is never mutated. When the path is
    missing, or its value is falsy, the copy is returned unchanged; payloads that
    are not mappings are returned as they are.
    """
    if payload is None:
        return None
    if not isinstance(payload, Mapping) or not path:
        return payload
    corrupted = copy.deepcopy(payload)
    parent: Any = corrupted
    for key in path[:-1]:
        parent = parent.get(key) if isinstance(parent, Mapping) else None
        if parent is None:
            return corrupted
    if isinstance(parent, MutableMapping) and parent.get(path[-1]):
        parent[path[-1]] = sentinel
    return corrupted
