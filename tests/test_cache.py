import asyncio

import pytest

from app.models.internal import VideoInfo
from app.services.cache import CacheSweeper, ResultCache

from conftest import FakeClock

URL = "https://example.com/watch?v=1"


def test_get_returns_stored_info(cache):
    info = VideoInfo(title="a")
    cache.put(URL, info)

    assert cache.get(URL) is info


def test_miss_for_unknown_url(cache):
    assert cache.get(URL) is None


def test_entry_expires_after_ttl_without_sweep(cache, clock):
    cache.put(URL, VideoInfo(title="a"))

    clock.advance(299)
    assert cache.get(URL) is not None

    clock.advance(2)
    assert cache.get(URL) is None
    # lazily dropped on read
    assert len(cache) == 0


def test_urls_are_not_canonicalized(cache):
    cache.put(URL, VideoInfo(title="a"))

    assert cache.get(URL + "&") is None
    assert cache.get(URL.replace("https", "HTTPS")) is None


def test_put_overwrites_and_restarts_ttl(cache, clock):
    cache.put(URL, VideoInfo(title="old"))
    clock.advance(200)
    cache.put(URL, VideoInfo(title="new"))
    clock.advance(200)

    assert cache.get(URL).title == "new"


def test_sweep_removes_only_expired_entries(cache, clock):
    cache.put("https://a.example/1", VideoInfo(title="a"))
    clock.advance(200)
    cache.put("https://b.example/2", VideoInfo(title="b"))
    clock.advance(150)

    assert cache.sweep() == 1
    assert len(cache) == 1
    assert cache.get("https://b.example/2").title == "b"


def test_clear_and_stats(cache):
    cache.put(URL, VideoInfo())
    cache.get(URL)
    cache.get("https://missing.example/")

    stats = cache.stats()
    assert stats["entries"] == 1
    assert stats["hits"] == 1
    assert stats["misses"] == 1

    assert cache.clear() == 1
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_sweeper_sweeps_on_each_tick():
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=300, clock=clock)
    cache.put(URL, VideoInfo(title="a"))
    ticks = []
    ticked = asyncio.Event()

    async def fake_sleep(seconds):
        ticks.append(seconds)
        if len(ticks) == 2:
            ticked.set()
            await asyncio.Event().wait()
        clock.advance(seconds)

    sweeper = CacheSweeper(cache, interval_seconds=600, sleep=fake_sleep)
    sweeper.start()
    await asyncio.wait_for(ticked.wait(), timeout=1)

    assert ticks == [600, 600]
    assert len(cache) == 0
    assert sweeper.running

    await sweeper.stop()
    assert not sweeper.running


class FlakySweepCache(ResultCache):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sweeps = 0

    def sweep(self) -> int:
        self.sweeps += 1
        if self.sweeps == 1:
            raise RuntimeError("boom")
        return super().sweep()


@pytest.mark.asyncio
async def test_sweeper_survives_a_failing_sweep(caplog):
    clock = FakeClock()
    cache = FlakySweepCache(ttl_seconds=300, clock=clock)
    cache.put(URL, VideoInfo(title="a"))
    ticks = []
    ticked = asyncio.Event()

    async def fake_sleep(seconds):
        ticks.append(seconds)
        if len(ticks) == 3:
            ticked.set()
            await asyncio.Event().wait()
        clock.advance(seconds)

    sweeper = CacheSweeper(cache, interval_seconds=600, sleep=fake_sleep)
    sweeper.start()
    await asyncio.wait_for(ticked.wait(), timeout=1)

    assert cache.sweeps == 2
    assert len(cache) == 0
    assert sweeper.running
    assert "Cache sweep failed: boom" in caplog.text

    await sweeper.stop()
