"""In-process response cache for link previews.

Two variants share the ``get``/``set`` contract used by the orchestrator:

- DisabledCache: never stores anything.
- InMemoryCache: keeps a private copy of each result with its insertion
  time and hands out copies, so callers never share an instance. ``get`` does not
  look at the age; a background sweeper thread evicts entries older than
  ``invalidation_timeout`` every ``cleanup_interval`` seconds.

Keys are absolute URL strings. Nothing is persisted across restarts.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol

from linkpreview.config import Settings, settings as default_settings
from linkpreview.core.metrics import preview_cache_lookups_total
from linkpreview.schemas.preview import PreviewResult

logger = logging.getLogger(__name__)


class Cache(Protocol):
    def get(self, key: str) -> PreviewResult | None: ...

    def set(self, key: str, value: PreviewResult) -> None: ...


class DisabledCache:
    """Cache that never stores anything."""

    def get(self, key: str) -> PreviewResult | None:
        return None

    def set(self, key: str, value: PreviewResult) -> None:
        return None

    def close(self) -> None:
        return None


@dataclass
class CacheEntry:
    value: PreviewResult
    inserted_at: float = field(default_factory=time.monotonic)


class InMemoryCache:
    """TTL cache swept by a daemon thread.

    Safe for concurrent ``get``/``set`` from any thread or task; every access
    to the backing dict happens under one lock.
    """

    def __init__(
        self,
        invalidation_timeout: float = 300.0,
        cleanup_interval: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
        start_sweeper: bool = True,
    ):
        self.invalidation_timeout = invalidation_timeout
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._lock = threading.Lock()
        self._store: dict[str, CacheEntry] = {}
        self._stop = threading.Event()
        self._sweeper: threading.Thread | None = None
        if start_sweeper:
            self._sweeper = threading.Thread(
                target=self._sweep_loop, name="linkpreview-cache-sweeper", daemon=True
            )
            self._sweeper.start()

    def get(self, key: str) -> PreviewResult | None:
        with self._lock:
            entry = self._store.get(key)
        if entry is None:
            preview_cache_lookups_total.labels(result="miss").inc()
            return None
        preview_cache_lookups_total.labels(result="hit").inc()
        logger.debug(f"Cache hit for {key}")
        return entry.value.model_copy(deep=True)

    def set(self, key: str, value: PreviewResult) -> None:
        with self._lock:
            self._store[key] = CacheEntry(
                value=value.model_copy(deep=True), inserted_at=self._clock()
            )
        logger.debug(f"Cached preview for {key} (TTL={self.invalidation_timeout}s)")

    def sweep(self) -> int:
        """Evict entries older than the invalidation timeout. Returns the count removed."""
        now = self._clock()
        with self._lock:
            expired = [
                key
                for key, entry in self._store.items()
                if now - entry.inserted_at > self.invalidation_timeout
            ]
            for key in expired:
                del self._store[key]
        if expired:
            logger.debug(f"Cache sweep evicted {len(expired)} entries")
        return len(expired)

    def _sweep_loop(self) -> None:
        while not self._stop.wait(self.cleanup_interval):
            self.sweep()

    def close(self) -> None:
        """Stop the sweeper thread. Stored entries stay readable."""
        self._stop.set()
        if self._sweeper is not None and self._sweeper is not threading.current_thread():
            self._sweeper.join(timeout=1.0)
        self._sweeper = None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._store


def build_cache(config: Settings | None = None) -> DisabledCache | InMemoryCache:
    """Pick the cache variant from settings."""
    config = config or default_settings
    if not config.CACHE_ENABLED:
        return DisabledCache()
    return InMemoryCache(
        invalidation_timeout=config.CACHE_INVALIDATION_TIMEOUT,
        cleanup_interval=config.CACHE_CLEANUP_INTERVAL,
    )
