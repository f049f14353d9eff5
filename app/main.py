import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api import admin, download, formats, health
from app.config.settings import CONFIG_PATH, config, ensure_config_file
from app.core.logging import setup_logging
from app.core.state import state
from app.infra.redis import close_redis, init_redis
from app.services.cache import CacheSweeper, ResultCache
from app.services.info import InfoResolver
from app.services.ytdlp import YtDlpExtractor

setup_logging(config.logging)

app = FastAPI(
    title=config.api.title,
    description=config.api.description,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(formats.router, tags=["Formats"])
app.include_router(download.router, tags=["Download"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])


@app.on_event("startup")
async def startup_event():
    ensure_config_file(config, CONFIG_PATH)

    extractor = YtDlpExtractor.from_config(config.extractor)
    state.ytdlp_version = await extractor.version()

    state.cache = ResultCache(ttl_seconds=config.cache.ttl_seconds)
    state.resolver = InfoResolver(extractor, state.cache)
    state.sweeper = CacheSweeper(state.cache, interval_seconds=config.cache.check_period_seconds)
    state.sweeper.start()

    await init_redis()


@app.on_event("shutdown")
async def shutdown_event():
    if state.sweeper:
        await state.sweeper.stop()
    await close_redis()
