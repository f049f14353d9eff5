from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from rich.console import Console

from app.config.settings import config
from app.core.state import state

console = Console()


async def init_redis() -> Optional[aioredis.Redis]:
    """Connect to Redis; the service keeps running without it"""
    try:
        redis_client = aioredis.from_url(
            config.redis.url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=config.redis.socket_timeout
        )
        await redis_client.ping()
    except (RedisError, OSError) as e:
        console.print(f"[yellow]⚠ Redis connection failed, rate limiting disabled: {str(e)}[/yellow]")
        state.redis = None
        return None

    console.print("[green]✓ Redis connected[/green]")
    state.redis = redis_client
    return redis_client


def get_redis() -> Optional[aioredis.Redis]:
    """Get Redis client from state"""
    return state.redis


async def close_redis() -> None:
    """Close Redis connection"""
    if state.redis:
        await state.redis.aclose()
        state.redis = None
        console.print("[dim]✓ Redis connection closed[/dim]")
