from typing import List, Optional

from pydantic import BaseModel


class FormatEntry(BaseModel):
    """One selectable format as shown to the caller"""
    id: Optional[str] = None
    label: str
    resolution: Optional[str] = None
    container: Optional[str] = None
    note: Optional[str] = None
    file_size: Optional[int] = None
    bitrate: Optional[float] = None
    audio_codec: Optional[str] = None
    video_codec: Optional[str] = None


class FormatListResponse(BaseModel):
    """Formats available for a URL"""
    title: str
    formats: List[FormatEntry] = []


class DownloadLinkResponse(BaseModel):
    """Directly fetchable locator for the selected variant"""
    download_url: str
