import logging
from typing import Any, Awaitable, Callable, Dict

from app.core.errors import ExtractionFailure
from app.models.internal import VideoInfo
from app.services.cache import ResultCache
from app.services.classifier import classify
from app.services.normalizer import normalize_info
from app.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)

# async (url) -> raw info dict; raises ExtractionFailure with the tool's text
Extractor = Callable[[str], Awaitable[Dict[str, Any]]]


class InfoResolver:
    """Resolve a URL into a VideoInfo, through the result cache"""

    def __init__(self, extractor: Extractor, cache: ResultCache):
        self.extractor = extractor
        self.cache = cache

    async def resolve(self, url: str) -> VideoInfo:
        """
        Return cached info or run one extraction.

        Failures are classified into a ResolutionError and never cached, so
        every call for a failing URL extracts again. No retries are made.
        """
        safe_url = safe_url_for_log(url)

        cached = self.cache.get(url)
        if cached is not None:
            logger.info(f"Cache HIT for: {safe_url}")
            return cached

        logger.info(f"Cache MISS for: {safe_url}. Running extraction")
        try:
            raw = await self.extractor(url)
            info = normalize_info(raw)
        except ExtractionFailure as e:
            error = classify(e.raw_message)
            logger.warning(f"Extraction failed for {safe_url}: {error.kind.value}")
            logger.debug(f"Raw extraction error: {e.raw_message}")
            raise error from e

        self.cache.put(url, info)
        logger.info(f"Fetched and cached info for: {safe_url} ({len(info.formats)} formats)")
        return info
