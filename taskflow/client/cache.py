"""Keyed cache for server state: read-through with retry, prefix invalidation."""

import logging
import threading
from collections.abc import Callable, Hashable, Mapping
from typing import Any, TypeVar

from taskflow.client.api import ApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")

QueryKey = tuple[Hashable, ...]


def make_key(resource: str, params: Mapping[str, Any] | None = None) -> QueryKey:
    """(resource,) plus the sorted non-empty params, so equal filters give equal keys."""
    if not params:
        return (resource,)
    active = tuple(sorted((k, v) for k, v in params.items() if v is not None))
    return (resource, active) if active else (resource,)


class QueryCache:
    """
    Maps query keys to the last successfully loaded value.

    Concurrent fetches of the same key share one load: the second caller
    waits on the key's lock and then reads the cached value.
    """

    def __init__(self) -> None:
        self._entries: dict[QueryKey, Any] = {}
        self._lock = threading.Lock()
        self._key_locks: dict[QueryKey, threading.Lock] = {}

    def _key_lock(self, key: QueryKey) -> threading.Lock:
        with self._lock:
            return self._key_locks.setdefault(key, threading.Lock())

    def get(self, key: QueryKey) -> Any | None:
        with self._lock:
            return self._entries.get(key)

    def __contains__(self, key: QueryKey) -> bool:
        with self._lock:
            return key in self._entries

    def fetch(self, key: QueryKey, loader: Callable[[], T], retry: int = 1) -> T:
        """
        Return the cached value for key, loading it on a miss.

        A failing load is retried up to ``retry`` times; the last ApiError is
        raised if every attempt fails, and nothing is cached.
        """
        if retry < 0:
            raise ValueError(f"retry must be >= 0, got {retry}")
        with self._key_lock(key):
            with self._lock:
                if key in self._entries:
                    return self._entries[key]
            attempt = 0
            while True:
                attempt += 1
                try:
                    value = loader()
                except ApiError as e:
                    logger.debug("Query %r failed (attempt %d): %s", key, attempt, e.message)
                    if attempt > retry:
                        # Nothing cached, so the key keeps no lock either.
                        with self._lock:
                            self._key_locks.pop(key, None)
                        raise
                    continue
                with self._lock:
                    self._entries[key] = value
                return value

    def invalidate(self, *prefix: Hashable) -> int:
        """Drop every entry whose key starts with prefix; returns how many were dropped."""
        n = len(prefix)
        with self._lock:
            stale = [k for k in self._entries if k[:n] == prefix]
            for k in stale:
                del self._entries[k]
            for k in [k for k in self._key_locks if k[:n] == prefix]:
                del self._key_locks[k]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()
