"""Content-addressed cache for detection results with TTL eviction."""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from typing import Callable, Generic, TypeVar

import cachetools

from chordsheet.config import DEFAULT_CACHE_MAX_ENTRIES, DEFAULT_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")


def content_key(text: str, *, salt: str = "") -> str:
    """SHA-256 of the text, namespaced by a configuration fingerprint."""

    digest = hashlib.sha256()
    digest.update(salt.encode("utf-8"))
    digest.update(b"\x00")
    digest.update(text.encode("utf-8"))
    return digest.hexdigest()


class DetectionCache(Generic[T]):
    """Thread-safe TTL cache that computes each missing key at most once.

    Concurrent callers asking for the same content wait on a per-key lock
    while the first caller computes; the rest reuse the stored value.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
        *,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._entries: cachetools.TTLCache = cachetools.TTLCache(maxsize=max_entries, ttl=ttl_seconds, timer=timer)
        self._lock = threading.Lock()
        self._key_locks: dict[str, threading.Lock] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    def get(self, key: str) -> T | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: T) -> None:
        with self._lock:
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_or_compute(self, text: str, compute: Callable[[], T], *, salt: str = "") -> T:
        key = content_key(text, salt=salt)

        with self._lock:
            if key in self._entries:
                self.hits += 1
                return self._entries[key]
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                if key in self._entries:
                    self.hits += 1
                    return self._entries[key]

            try:
                value = compute()
                with self._lock:
                    self.misses += 1
                    self._entries[key] = value
                    logger.debug("Cached detection result %s (entries=%d)", key[:12], len(self._entries))
            finally:
                with self._lock:
                    self._key_locks.pop(key, None)

        return value
