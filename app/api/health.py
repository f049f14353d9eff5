from fastapi import APIRouter
from redis.exceptions import RedisError

from app.config.settings import config
from app.core.state import state
from app.i18n import i18n

router = APIRouter()


async def _redis_status() -> str:
    if not state.redis:
        return i18n.get("response.redis_disabled")
    try:
        await state.redis.ping()
    except (RedisError, OSError):
        return i18n.get("response.redis_disconnected")
    return i18n.get("response.redis_connected")


@router.get("/")
async def root():
    """Root endpoint"""
    return {
        "status": i18n.get("response.status_running"),
        "service": config.api.title,
        "version": config.api.version,
        "ytdlp_version": state.ytdlp_version,
        "redis_enabled": state.redis is not None,
    }


@router.get("/health")
async def health_check():
    """Lightweight health check"""
    return {
        "status": i18n.get("health.status"),
        "redis": await _redis_status(),
    }


@router.get("/health/full")
async def health_check_full():
    """Detailed health check"""
    return {
        "status": i18n.get("health.status"),
        "ytdlp_version": state.ytdlp_version,
        "redis_status": await _redis_status(),
        "resolver_ready": state.resolver is not None,
        "cache": state.cache.stats() if state.cache else None,
        "cache_sweeper_running": bool(state.sweeper and state.sweeper.running),
    }
