import functools
import logging

from fastapi import HTTPException, Request
from redis.exceptions import RedisError

from app.config.settings import RateLimitConfig, config
from app.i18n import i18n
from app.infra.redis import get_redis
from app.utils.locale import get_locale

logger = logging.getLogger(__name__)

# Fixed window counter: returns {allowed, ttl}
RATE_LIMIT_SCRIPT = """
local key = KEYS[1]
local limit = tonumber(ARGV[1])
local window = tonumber(ARGV[2])

local current = redis.call('INCR', key)
if current == 1 then
    redis.call('EXPIRE', key, window)
end

if current > limit then
    local ttl = redis.call('TTL', key)
    return {0, ttl}
end

return {1, 0}
"""


class RedisRateLimiter:
    """Per client-IP and path rate limiter; fails open without Redis"""

    def __init__(self, settings: RateLimitConfig):
        self.settings = settings

    async def __call__(self, request: Request):
        if not self.settings.enabled:
            return True

        redis = get_redis()
        if not redis:
            return True

        client_ip = request.client.host if request.client else "unknown"
        key = f"rate:{client_ip}:{request.url.path}"

        try:
            allowed, ttl = await redis.eval(
                RATE_LIMIT_SCRIPT,
                1,
                key,
                self.settings.max_requests,
                self.settings.window_seconds
            )
        except RedisError as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
            return True

        if not allowed:
            locale = get_locale(request.headers.get("accept-language"))
            _ = functools.partial(i18n.get, locale=locale)
            raise HTTPException(
                status_code=429,
                detail=_("error.rate_limit", seconds=ttl),
                headers={"Retry-After": str(ttl)}
            )

        return True


rate_limiter = RedisRateLimiter(config.rate_limit)
