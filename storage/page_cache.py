"""In-memory cache of rendered pages, invalidated by path."""

import time
from typing import Any

import structlog

log = structlog.get_logger(__name__)


class PageCache:
    """Per-path TTL cache standing in for the render cache of the web layer."""

    def __init__(self, ttl: int = 60) -> None:
        self._ttl = ttl
        self._store: dict[str, tuple[Any, float]] = {}

    def get(self, path: str) -> Any | None:
        """Get a cached page, or None if expired/missing."""
        entry = self._store.get(path)
        if entry is None:
            return None
        value, expires_at = entry
        if time.time() > expires_at:
            del self._store[path]
            return None
        return value

    def set(self, path: str, value: Any, ttl: int | None = None) -> None:
        self._store[path] = (value, time.time() + (ttl if ttl is not None else self._ttl))

    def revalidate_path(self, path: str) -> None:
        """Drop the cached output for ``path`` so the next request rebuilds it."""
        self._store.pop(path, None)
        log.debug("path_revalidated", path=path)
