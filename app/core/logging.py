import logging
from typing import Any

from fastapi import Request
from rich.logging import RichHandler

from app.config.settings import LoggingConfig

logger = logging.getLogger("app.request")


def setup_logging(settings: LoggingConfig) -> None:
    """Configure the root logger from the logging config section"""
    if settings.enable_rich:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(settings.format))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.level)


def log_with_context(
    request: Request,
    level: int,
    message: str,
    **kwargs: Any
) -> None:
    """
    Log with request context.
    Includes the request_id assigned by the request-id middleware.
    """
    request_id = getattr(request.state, "request_id", "unknown")
    extra = {"request_id": request_id, **kwargs}
    logger.log(level, f"[{request_id}] {message}", extra=extra)


def log_info(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.INFO, message, **kwargs)


def log_error(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.ERROR, message, **kwargs)


def log_warning(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.WARNING, message, **kwargs)


def log_debug(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.DEBUG, message, **kwargs)
