import asyncio
import functools
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.errors import ResolutionError, to_http_exception
from app.core.logging import log_error, log_info
from app.core.state import get_resolver
from app.i18n import i18n
from app.infra.rate_limit import rate_limiter
from app.models.request import DownloadLinkRequest
from app.models.response import DownloadLinkResponse
from app.services.format import FormatSelector
from app.services.info import InfoResolver
from app.utils.locale import get_locale, safe_url_for_log

router = APIRouter()


@router.post("/download-link", response_model=DownloadLinkResponse, dependencies=[Depends(rate_limiter)])
async def resolve_download(
    request: Request,
    link_request: DownloadLinkRequest,
    resolver: Optional[InfoResolver] = Depends(get_resolver),
):
    """Resolve a media URL into a directly fetchable link for one variant"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    if resolver is None:
        raise HTTPException(status_code=503, detail=_("error.resolver_unavailable"))

    intent = link_request.to_intent()
    safe_url = safe_url_for_log(link_request.url)
    log_info(request, _("log.resolving_link", url=safe_url, request_class=intent.request_class.value))

    try:
        video_info = await resolver.resolve(link_request.url)
        download_url = FormatSelector.pick(video_info, intent)
    except ResolutionError as e:
        log_info(request, f"Download link failed for {safe_url}: {e.kind.value}")
        raise to_http_exception(e, _)
    except asyncio.TimeoutError:
        log_error(request, f"Extraction timed out for {safe_url}")
        raise HTTPException(status_code=504, detail=_("error.timeout"))
    except Exception as e:
        log_error(request, f"Unexpected error while resolving download link: {str(e)}")
        raise HTTPException(status_code=500, detail=_("error.internal"))

    log_info(request, _("log.link_resolved", url=safe_url))
    return DownloadLinkResponse(download_url=download_url)
