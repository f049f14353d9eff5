"""Turn the extraction tool's loosely-typed JSON into VideoInfo/Format.

yt-dlp output is not a stable contract: any key may be missing, null or of an
unexpected type. Everything here defaults to None instead of raising, except
for a payload that is not an object at all.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from app.core.errors import ExtractionFailure
from app.models.internal import Format, VideoInfo

logger = logging.getLogger(__name__)


def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _number(value: Any) -> Optional[float]:
    # bool is an int subclass; a flag is never a measurement
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _int(value: Any) -> Optional[int]:
    number = _number(value)
    if number is None:
        return None
    return int(number)


def normalize_format(raw: Dict[str, Any]) -> Format:
    file_size = _int(raw.get("filesize"))
    if file_size is None:
        file_size = _int(raw.get("filesize_approx"))

    return Format(
        id=_str(raw.get("format_id")),
        url=_str(raw.get("url")),
        container=_str(raw.get("ext")),
        protocol=_str(raw.get("protocol")),
        height=_int(raw.get("height")),
        width=_int(raw.get("width")),
        bitrate=_number(raw.get("tbr")),
        video_codec=_str(raw.get("vcodec")),
        audio_codec=_str(raw.get("acodec")),
        file_size=file_size,
        note=_str(raw.get("format_note")),
        resolution_label=_str(raw.get("resolution")),
    )


def normalize_info(raw: Any) -> VideoInfo:
    """Build a VideoInfo from one successful extraction payload"""
    if not isinstance(raw, dict):
        raise ExtractionFailure(f"Unexpected JSON metadata type: {type(raw).__name__}")

    raw_formats = raw.get("formats")
    formats: List[Format] = []
    if isinstance(raw_formats, list):
        for entry in raw_formats:
            if isinstance(entry, dict):
                formats.append(normalize_format(entry))
        skipped = len(raw_formats) - len(formats)
        if skipped:
            logger.debug(f"Skipped {skipped} malformed format entries")

    return VideoInfo(
        title=_str(raw.get("title")),
        thumbnail=_str(raw.get("thumbnail")),
        duration=_number(raw.get("duration")),
        direct_url=_str(raw.get("url")),
        direct_ext=_str(raw.get("ext")),
        direct_protocol=_str(raw.get("protocol")),
        formats=tuple(formats),
    )
