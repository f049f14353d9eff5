import asyncio
from typing import Any, Dict, List, Optional, Union

import pytest

from app.core.errors import ExtractionFailure
from app.models.internal import Format, VideoInfo
from app.services.cache import ResultCache
from app.services.info import InfoResolver

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeExtractor:
    """Extractor returning canned payloads (or raising canned failures) per URL"""

    def __init__(self, responses: Optional[Dict[str, Union[Dict[str, Any], Exception]]] = None):
        self.responses = dict(responses or {})
        self.calls: List[str] = []

    async def __call__(self, url: str) -> Dict[str, Any]:
        self.calls.append(url)
        # yield like a real subprocess call would
        await asyncio.sleep(0)
        response = self.responses.get(url)
        if response is None:
            raise ExtractionFailure(f"ERROR: Unsupported URL: {url}")
        if isinstance(response, Exception):
            raise response
        return response


def raw_format(**fields: Any) -> Dict[str, Any]:
    """yt-dlp style format dict"""
    return dict(fields)


def youtube_payload() -> Dict[str, Any]:
    return {
        "id": "dQw4w9WgXcQ",
        "title": "Never Gonna Give You Up",
        "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
        "duration": 212,
        "formats": [
            raw_format(format_id="140", ext="m4a", vcodec="none", acodec="mp4a.40.2", tbr=129.5,
                       url="https://cdn.example/140", format_note="medium", resolution="audio only"),
            raw_format(format_id="251", ext="webm", vcodec="none", acodec="opus", tbr=160.1,
                       url="https://cdn.example/251", format_note="medium", resolution="audio only"),
            raw_format(format_id="18", ext="mp4", vcodec="avc1.42001E", acodec="mp4a.40.2", height=360,
                       width=640, tbr=503.0, url="https://cdn.example/18", format_note="360p",
                       resolution="640x360", filesize=13_500_000),
            raw_format(format_id="137", ext="mp4", vcodec="avc1.640028", acodec="none", height=1080,
                       width=1920, tbr=4400.0, url="https://cdn.example/137", format_note="1080p",
                       resolution="1920x1080"),
            raw_format(format_id="sb0", ext="mhtml", vcodec="none", acodec="none",
                       url="https://cdn.example/sb0", format_note="storyboard"),
        ],
    }


def make_info(*formats: Format, **fields: Any) -> VideoInfo:
    return VideoInfo(formats=tuple(formats), **fields)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResultCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def extractor():
    return FakeExtractor({VIDEO_URL: youtube_payload()})


@pytest.fixture
def resolver(extractor, cache):
    return InfoResolver(extractor, cache)
