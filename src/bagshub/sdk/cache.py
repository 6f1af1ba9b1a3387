"""Client-local query cache: staleness window, background refresh, in-flight coalescing."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable, Optional

logger = logging.getLogger(__name__)

DEFAULT_STALE_TIME = 30.0
DEFAULT_REFETCH_INTERVAL = 60.0
DEFAULT_GC_TIME = 300.0

Fetcher = Callable[[], Awaitable[Any]]


def make_key(kind: str, **filters) -> tuple:
    """Normalise a request shape into a hashable key; None filters are dropped."""
    return (kind, *sorted((k, v) for k, v in filters.items() if v is not None))


@dataclass
class CacheEntry:
    data: Any
    updated_at: float
    last_used: float


class QueryCache:
    def __init__(
        self,
        stale_time: float = DEFAULT_STALE_TIME,
        refetch_interval: float = DEFAULT_REFETCH_INTERVAL,
        gc_time: float = DEFAULT_GC_TIME,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stale_time = stale_time
        self.refetch_interval = refetch_interval
        self.gc_time = gc_time
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}
        self._inflight: dict[Hashable, asyncio.Task] = {}
        self._refreshers: dict[Hashable, asyncio.Task] = {}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def is_fresh(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._clock() - entry.updated_at < self.stale_time

    async def fetch(self, key: Hashable, fetcher: Fetcher, force: bool = False) -> Any:
        """Return cached data while fresh, otherwise fetch. Concurrent callers share one task."""
        if not force and self.is_fresh(key):
            entry = self._entries[key]
            entry.last_used = self._clock()
            return entry.data

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, fetcher))
            self._inflight[key] = task
        return await asyncio.shield(task)

    async def _run(self, key: Hashable, fetcher: Fetcher) -> Any:
        me = asyncio.current_task()
        try:
            data = await fetcher()
            # superseded requests still answer their callers but never write
            if self._inflight.get(key) is me:
                self.set_data(key, data)
            return data
        finally:
            if self._inflight.get(key) is me:
                del self._inflight[key]

    def cancel(self, key: Hashable) -> None:
        """Detach any in-flight fetch for key so its result can no longer land in the cache."""
        self._inflight.pop(key, None)

    def get_data(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        entry.last_used = self._clock()
        return entry.data

    def set_data(self, key: Hashable, data: Any) -> None:
        now = self._clock()
        self._entries[key] = CacheEntry(data=data, updated_at=now, last_used=now)
        self._collect(now)

    def invalidate(self, key: Hashable) -> None:
        """Mark an entry stale; data stays readable until the next fetch replaces it."""
        entry = self._entries.get(key)
        if entry is not None:
            entry.updated_at = float("-inf")

    def _collect(self, now: float) -> None:
        idle = [
            key
            for key, entry in self._entries.items()
            if now - entry.last_used > self.gc_time and key not in self._refreshers and key not in self._inflight
        ]
        for key in idle:
            del self._entries[key]
        if idle:
            logger.debug("Evicted %d idle cache entries", len(idle))

    def start_refresh(self, key: Hashable, fetcher: Fetcher) -> asyncio.Task:
        existing = self._refreshers.get(key)
        if existing is not None and not existing.done():
            return existing
        task = asyncio.create_task(self._refresh_loop(key, fetcher))
        self._refreshers[key] = task
        return task

    async def _refresh_loop(self, key: Hashable, fetcher: Fetcher) -> None:
        while True:
            await asyncio.sleep(self.refetch_interval)
            try:
                await self.fetch(key, fetcher, force=True)
            except Exception as e:
                # last good data stays cached; the next tick retries
                logger.warning("Background refresh of %s failed: %s", key, e)

    def stop_refresh(self, key: Hashable) -> None:
        task = self._refreshers.pop(key, None)
        if task is not None:
            task.cancel()

    async def close(self) -> None:
        tasks = list(self._refreshers.values())
        self._refreshers.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
