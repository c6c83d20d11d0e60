"""In-memory TTL cache with single-flight fetches. No Redis needed.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
a location may be fetched twice (once per worker). Within one worker,
concurrent requests for the same key always share a single upstream call.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, TypeVar

from models import Coordinates, QueryKind, Units

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheKey:
    coordinates: Coordinates
    units: Units
    kind: QueryKind

    def __str__(self) -> str:
        return (
            f"{self.kind.value}:{self.coordinates.lat},{self.coordinates.lon}:{self.units.value}"
        )


@dataclass(frozen=True)
class CachedElement(Generic[T]):
    payload: T
    stored_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    waits: int = 0


@dataclass
class CacheStore(Generic[T]):
    """Keyed store of fetched payloads.

    ``get_or_fetch`` is the only way in: a fresh entry is returned as is,
    otherwise exactly one fetch runs per key and every concurrent caller
    for that key awaits it. The lock only guards the two dicts; fetches
    run outside it so slow keys never block unrelated ones.
    """

    ttl: float
    clock: Callable[[], float] = time.monotonic
    stats: CacheStats = field(default_factory=CacheStats)
    _entries: dict[CacheKey, CachedElement[T]] = field(default_factory=dict, init=False)
    _in_flight: dict[CacheKey, asyncio.Task] = field(default_factory=dict, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def peek(self, key: CacheKey) -> CachedElement[T] | None:
        """Inspection hook for tests and debugging: stored element for key, fresh
        or not. Never fetches and never counts towards stats.
        """
        return self._entries.get(key)

    async def get_or_fetch(self, key: CacheKey, fetch: Callable[[], Awaitable[T]]) -> T:
        """Return the cached payload for key, fetching it at most once concurrently.

        Fetch exceptions propagate unchanged to every waiter and are never
        cached. Cancelling a caller does not cancel the shared fetch.
        """
        async with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_fresh(self.clock()):
                self.stats.hits += 1
                logger.debug("Cache hit: %s", key)
                return entry.payload

            task = self._in_flight.get(key)
            if task is None:
                # A failed refresh must leave nothing cached
                self._entries.pop(key, None)
                task = asyncio.create_task(self._populate(key, fetch), name=f"fetch {key}")
                task.add_done_callback(_retrieve_exception)
                self._in_flight[key] = task
                self.stats.misses += 1
                logger.debug("Cache miss: %s", key)
            else:
                self.stats.waits += 1
                logger.debug("Cache wait on in-flight fetch: %s", key)

        return await asyncio.shield(task)

    async def _populate(self, key: CacheKey, fetch: Callable[[], Awaitable[T]]) -> T:
        try:
            payload = await fetch()
        except BaseException as e:
            async with self._lock:
                self._in_flight.pop(key, None)
            logger.warning("Fetch failed for %s: %s", key, type(e).__name__)
            raise

        async with self._lock:
            self._entries[key] = CachedElement(payload, stored_at=self.clock(), ttl=self.ttl)
            self._in_flight.pop(key, None)
        return payload

    async def aclose(self) -> None:
        """Cancel fetches still running at shutdown."""
        async with self._lock:
            tasks = list(self._in_flight.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        # A task cancelled before its first step never reaches its own cleanup
        async with self._lock:
            self._in_flight.clear()


def _retrieve_exception(task: asyncio.Task) -> None:
    # No waiter may be left to retrieve it
    if not task.cancelled():
        task.exception()
