import asyncio
import functools
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.errors import ResolutionError, to_http_exception
from app.core.logging import log_error, log_info
from app.core.state import get_resolver
from app.i18n import i18n
from app.infra.rate_limit import rate_limiter
from app.models.request import FormatsRequest
from app.models.response import FormatListResponse
from app.services.format import FormatSelector
from app.services.info import InfoResolver
from app.utils.locale import get_locale, safe_url_for_log

router = APIRouter()


@router.post("/formats", response_model=FormatListResponse, dependencies=[Depends(rate_limiter)])
async def list_formats(
    request: Request,
    formats_request: FormatsRequest,
    resolver: Optional[InfoResolver] = Depends(get_resolver),
):
    """List the selectable formats of a media URL"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    if resolver is None:
        raise HTTPException(status_code=503, detail=_("error.resolver_unavailable"))

    safe_url = safe_url_for_log(formats_request.url)
    log_info(request, _("log.listing_formats", url=safe_url))

    try:
        video_info = await resolver.resolve(formats_request.url)
        listing = FormatSelector.list_formats(video_info)
    except ResolutionError as e:
        log_info(request, f"Format listing failed for {safe_url}: {e.kind.value}")
        raise to_http_exception(e, _)
    except asyncio.TimeoutError:
        log_error(request, f"Extraction timed out for {safe_url}")
        raise HTTPException(status_code=504, detail=_("error.timeout"))
    except Exception as e:
        log_error(request, f"Unexpected error while listing formats: {str(e)}")
        raise HTTPException(status_code=500, detail=_("error.internal"))

    log_info(request, _("log.formats_listed", count=len(listing.formats), title=listing.title))
    return listing
