from .internal import DownloadIntent, Format, RequestClass, VideoInfo
from .request import DownloadLinkRequest, FormatsRequest
from .response import DownloadLinkResponse, FormatEntry, FormatListResponse

__all__ = [
    "DownloadIntent",
    "DownloadLinkRequest",
    "DownloadLinkResponse",
    "Format",
    "FormatEntry",
    "FormatListResponse",
    "FormatsRequest",
    "RequestClass",
    "VideoInfo",
]
