import asyncio
import logging
import threading
import time
from contextlib import suppress
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from app.models.internal import VideoInfo

logger = logging.getLogger(__name__)

INFO_CACHE_TTL = 300
INFO_CACHE_CHECK_PERIOD = 600


@dataclass(frozen=True)
class CacheEntry:
    info: VideoInfo
    expires_at: float


class ResultCache:
    """
    In-process TTL cache of resolved VideoInfo keyed by the verbatim URL.

    Expired entries are dropped lazily on read and eagerly by sweep().
    Concurrent puts for the same URL are last-write-wins. There is no
    in-flight de-duplication: two misses for the same URL both extract.
    """

    def __init__(
        self,
        ttl_seconds: float = INFO_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, url: str) -> Optional[VideoInfo]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(url)
            if entry is None:
                self.misses += 1
                return None
            if entry.expires_at <= now:
                del self._entries[url]
                self.misses += 1
                return None
            self.hits += 1
            return entry.info

    def put(self, url: str, info: VideoInfo) -> None:
        entry = CacheEntry(info=info, expires_at=self._clock() + self.ttl_seconds)
        with self._lock:
            self._entries[url] = entry

    def sweep(self) -> int:
        """Remove expired entries; returns how many were removed"""
        now = self._clock()
        with self._lock:
            expired = [url for url, entry in self._entries.items() if entry.expires_at <= now]

        removed = 0
        # One lock acquisition per removal so readers are never held up by a long sweep
        for url in expired:
            with self._lock:
                entry = self._entries.get(url)
                if entry is not None and entry.expires_at <= now:
                    del self._entries[url]
                    removed += 1
        return removed

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def stats(self) -> dict:
        with self._lock:
            size = len(self._entries)
        return {
            "entries": size,
            "hits": self.hits,
            "misses": self.misses,
            "ttl_seconds": self.ttl_seconds,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CacheSweeper:
    """Runs ResultCache.sweep() periodically on the event loop"""

    def __init__(
        self,
        cache: ResultCache,
        interval_seconds: float = INFO_CACHE_CHECK_PERIOD,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.cache = cache
        self.interval_seconds = interval_seconds
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        while True:
            await self._sleep(self.interval_seconds)
            try:
                removed = self.cache.sweep()
            except Exception as e:
                logger.error(f"Cache sweep failed: {str(e)}")
                continue
            if removed:
                logger.debug(f"Cache sweep removed {removed} expired entries")

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
