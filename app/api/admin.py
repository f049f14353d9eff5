import os

from fastapi import APIRouter, Depends, HTTPException, Security
from fastapi.security import APIKeyHeader

from app.config.settings import config
from app.core.state import state

router = APIRouter()

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: str = Security(api_key_header)):
    """Verify API key for admin endpoints; open when ADMIN_API_KEY is unset"""
    expected_key = os.getenv("ADMIN_API_KEY")
    if not expected_key:
        return None

    if api_key != expected_key:
        raise HTTPException(status_code=403, detail="Invalid API key")
    return api_key


@router.get("/config", dependencies=[Depends(verify_api_key)])
async def get_config():
    """Get current configuration (admin only)"""
    return {
        "cache": config.cache.model_dump(),
        "extractor": config.extractor.model_dump(),
        "rate_limit": config.rate_limit.model_dump(),
        "logging": config.logging.model_dump(),
        "i18n": config.i18n.model_dump(),
    }


@router.delete("/cache", dependencies=[Depends(verify_api_key)])
async def clear_cache():
    """Drop every cached video info entry"""
    removed = state.cache.clear() if state.cache else 0
    return {"removed": removed}
