from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel

# Codec value the extraction tool uses for "this stream has no such track"
NO_CODEC = "none"

DIRECT_FORMAT_ID = "direct"
BEST_AUDIO_FORMAT_ID = "mp3"


class Format(BaseModel):
    """One downloadable variant. Every field is optional."""

    class Config:
        frozen = True

    id: Optional[str] = None
    url: Optional[str] = None
    container: Optional[str] = None
    protocol: Optional[str] = None
    height: Optional[int] = None
    width: Optional[int] = None
    bitrate: Optional[float] = None
    video_codec: Optional[str] = None
    audio_codec: Optional[str] = None
    file_size: Optional[int] = None
    note: Optional[str] = None
    resolution_label: Optional[str] = None

    @property
    def has_video(self) -> bool:
        return self.video_codec != NO_CODEC

    @property
    def has_audio(self) -> bool:
        return self.audio_codec != NO_CODEC

    @property
    def is_audio_only(self) -> bool:
        return self.has_audio and not self.has_video


class VideoInfo(BaseModel):
    """Normalized resolution result for one source URL (immutable)"""

    class Config:
        frozen = True

    title: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: Optional[float] = None
    direct_url: Optional[str] = None
    direct_ext: Optional[str] = None
    direct_protocol: Optional[str] = None
    formats: Tuple[Format, ...] = ()


class RequestClass(str, Enum):
    DEFAULT = "default"
    EXPLICIT = "explicit"
    DIRECT = "direct"
    BEST_AUDIO = "best_audio"


class DownloadIntent(BaseModel):
    """Internal selection intent (separated from HTTP concerns)"""

    request_class: RequestClass
    format_id: Optional[str] = None

    @classmethod
    def from_format_id(cls, format_id: Optional[str]) -> "DownloadIntent":
        if format_id is None:
            return cls(request_class=RequestClass.DEFAULT)
        if format_id == DIRECT_FORMAT_ID:
            return cls(request_class=RequestClass.DIRECT, format_id=format_id)
        if format_id == BEST_AUDIO_FORMAT_ID:
            return cls(request_class=RequestClass.BEST_AUDIO, format_id=format_id)
        return cls(request_class=RequestClass.EXPLICIT, format_id=format_id)
