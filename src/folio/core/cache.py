"""Process-wide memoization with time-based expiry and tag-based invalidation.

Every entry carries a set of tags; a reverse index maps each tag to the keys
holding it so ``invalidate`` touches only the affected entries. Concurrent
misses for one key share a single in-flight producer task.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    computed_at: float
    ttl_seconds: float
    tags: frozenset[str]

    def is_fresh(self, now: float) -> bool:
        return now - self.computed_at < self.ttl_seconds


@dataclass(frozen=True)
class CachePolicy:
    """Lifetimes, in seconds, of the logical caches kept by the index and the renderer."""

    corpus: float = 3600
    post: float = 60
    featured: float = 60
    tags: float = 120
    categories: float = 120
    latest: float = 60
    markdown: float = 3600
    projects: float = 3600


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    entries: int
    inflight: int


@dataclass
class _Flight:
    tags: frozenset[str]
    task: asyncio.Task[Any] = field(init=False, repr=False)
    detached: bool = False


def _consume_exception(task: asyncio.Task[Any]) -> None:
    # Callers may all have been cancelled; read the error so asyncio does not report it.
    if not task.cancelled():
        task.exception()


class CacheLayer:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._tag_index: dict[str, set[str]] = {}
        self._inflight: dict[str, _Flight] = {}
        self._stale: dict[str, Any] = {}
        self._hits = 0
        self._misses = 0

    async def memoize(
        self,
        key: str,
        ttl_seconds: float,
        tags: Iterable[str],
        producer: Callable[[], Awaitable[T]],
        *,
        stale_if_error: bool = False,
    ) -> T:
        """Return the cached value for ``key`` or compute it with ``producer``.

        ``ttl_seconds <= 0`` computes on every call without storing. With
        ``stale_if_error`` a failing producer falls back to the last value
        produced for ``key``, if there is one.
        """
        entry = self._entries.get(key)
        if entry is not None:
            if entry.is_fresh(self._clock()):
                self._hits += 1
                return entry.value
            self._drop(key)
        self._misses += 1

        flight = self._inflight.get(key)
        if flight is None:
            flight = _Flight(tags=frozenset(tags))
            flight.task = asyncio.create_task(self._produce(key, ttl_seconds, flight, producer, stale_if_error))
            flight.task.add_done_callback(_consume_exception)
            self._inflight[key] = flight

        try:
            return await asyncio.shield(flight.task)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if stale_if_error and key in self._stale:
                logger.warning("Serving stale value for %s after producer failure: %s", key, exc)
                return self._stale[key]
            raise

    def invalidate(self, tag: str) -> int:
        """Void every entry tagged ``tag`` and detach in-flight productions carrying it."""
        keys = self._tag_index.pop(tag, set())
        voided = sum(1 for key in list(keys) if self._drop(key))
        for key, flight in list(self._inflight.items()):
            if tag in flight.tags:
                flight.detached = True
                del self._inflight[key]
        logger.debug("Invalidated tag %s (%d entries)", tag, voided)
        return voided

    def invalidate_key(self, key: str) -> bool:
        flight = self._inflight.pop(key, None)
        if flight is not None:
            flight.detached = True
        return self._drop(key)

    def clear(self) -> None:
        for flight in self._inflight.values():
            flight.detached = True
        self._inflight.clear()
        self._entries.clear()
        self._tag_index.clear()
        self._stale.clear()

    def prune(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_fresh(now)]
        for key in expired:
            self._drop(key)
        return len(expired)

    def stats(self) -> CacheStats:
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            entries=len(self._entries),
            inflight=len(self._inflight),
        )

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key) if isinstance(key, str) else None
        return entry is not None and entry.is_fresh(self._clock())

    async def _produce(
        self,
        key: str,
        ttl_seconds: float,
        flight: _Flight,
        producer: Callable[[], Awaitable[T]],
        keep_stale: bool,
    ) -> T:
        try:
            value = await producer()
        finally:
            if self._inflight.get(key) is flight:
                del self._inflight[key]

        if not flight.detached:
            if keep_stale:
                self._stale[key] = value
            if ttl_seconds > 0:
                self._store(key, value, ttl_seconds, flight.tags)
        return value

    def _store(self, key: str, value: Any, ttl_seconds: float, tags: frozenset[str]) -> None:
        self._drop(key)
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            computed_at=self._clock(),
            ttl_seconds=ttl_seconds,
            tags=tags,
        )
        for tag in tags:
            self._tag_index.setdefault(tag, set()).add(key)

    def _drop(self, key: str) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        for tag in entry.tags:
            keys = self._tag_index.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._tag_index[tag]
        return True
