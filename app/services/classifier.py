"""Map raw extraction failure text to a stable ErrorKind.

Matching is a best-effort, case-sensitive substring search over yt-dlp's
stderr. Rules are evaluated in order and the first match wins. If the
extraction layer ever reports structured error codes, prefer those.
"""

import logging
from typing import Optional, Sequence, Tuple

from app.core.errors import ErrorKind, ResolutionError

logger = logging.getLogger(__name__)

CLASSIFICATION_RULES: Sequence[Tuple[ErrorKind, Tuple[str, ...]]] = (
    (ErrorKind.UNSUPPORTED_URL, ("Unsupported URL",)),
    (ErrorKind.EXTRACTION_FAILED, ("Unable to extract video data", "JSON metadata")),
    (ErrorKind.AUTH_REQUIRED, ("private video", "Private video", "Login required", "Sign in to confirm")),
    (ErrorKind.NOT_FOUND, ("HTTP Error 404",)),
    (
        ErrorKind.NETWORK_UNREACHABLE,
        (
            "net::ERR_NAME_NOT_RESOLVED",
            "Temporary failure in name resolution",
            "Name or service not known",
            "nodename nor servname provided",
            "getaddrinfo failed",
            "No address associated with hostname",
        ),
    ),
    (ErrorKind.TOOL_UNAVAILABLE, ("No such file or directory", "Command failed", "ENOENT")),
)

MESSAGES = {
    ErrorKind.UNSUPPORTED_URL: "The provided URL is not supported.",
    ErrorKind.EXTRACTION_FAILED: "Could not extract video data from the URL.",
    ErrorKind.AUTH_REQUIRED: "This video is private or requires login.",
    ErrorKind.NOT_FOUND: "Video not found (404 error).",
    ErrorKind.NETWORK_UNREACHABLE: "Could not resolve the website address. Check the URL or your connection.",
    ErrorKind.TOOL_UNAVAILABLE: "Failed to execute the video downloader tool. Ensure yt-dlp is installed and accessible.",
    ErrorKind.UNKNOWN: "Failed to fetch video information.",
}


def match_kind(raw_error: Optional[str]) -> ErrorKind:
    if not raw_error:
        return ErrorKind.UNKNOWN
    for kind, phrases in CLASSIFICATION_RULES:
        if any(phrase in raw_error for phrase in phrases):
            return kind
    return ErrorKind.UNKNOWN


def classify(raw_error: Optional[str]) -> ResolutionError:
    """Build the user-facing failure for one raw extraction error"""
    kind = match_kind(raw_error)
    if kind is ErrorKind.UNKNOWN:
        logger.warning(f"Unclassified extraction failure: {(raw_error or '')[:500]}")
    return ResolutionError(kind, MESSAGES[kind], cause=raw_error)
