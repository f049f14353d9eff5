from dataclasses import dataclass
from typing import Optional

from redis.asyncio import Redis

from app.services.cache import CacheSweeper, ResultCache
from app.services.info import InfoResolver


@dataclass
class RuntimeState:
    """Centralized runtime state"""
    redis: Optional[Redis] = None
    ytdlp_version: str = "unknown"
    cache: Optional[ResultCache] = None
    sweeper: Optional[CacheSweeper] = None
    resolver: Optional[InfoResolver] = None


state = RuntimeState()


def get_resolver() -> Optional[InfoResolver]:
    """FastAPI dependency; overridden in tests"""
    return state.resolver
