"""Failure taxonomy for URL resolution and variant selection.

Every failure that leaves the resolver or the selector is a
:class:`ResolutionError` carrying one :class:`ErrorKind` and a user-safe
message. Raw text from the extraction tool is only ever kept as ``cause``.
"""

from enum import Enum
from typing import Any, Callable, Dict, Optional

from fastapi import HTTPException


class ErrorKind(str, Enum):
    UNSUPPORTED_URL = "UnsupportedURL"
    EXTRACTION_FAILED = "ExtractionFailed"
    AUTH_REQUIRED = "AuthRequired"
    NOT_FOUND = "NotFound"
    NETWORK_UNREACHABLE = "NetworkUnreachable"
    TOOL_UNAVAILABLE = "ToolUnavailable"
    FORMAT_NOT_FOUND = "FormatNotFound"
    NO_SUITABLE_FORMAT = "NoSuitableFormat"
    NO_AUDIO_STREAM = "NoAudioStream"
    UNKNOWN = "Unknown"


# HTTP status returned by the API layer for each kind
STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.UNSUPPORTED_URL: 400,
    ErrorKind.EXTRACTION_FAILED: 400,
    ErrorKind.AUTH_REQUIRED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.NETWORK_UNREACHABLE: 502,
    ErrorKind.TOOL_UNAVAILABLE: 503,
    ErrorKind.FORMAT_NOT_FOUND: 404,
    ErrorKind.NO_SUITABLE_FORMAT: 404,
    ErrorKind.NO_AUDIO_STREAM: 404,
    ErrorKind.UNKNOWN: 400,
}


class ResolutionError(Exception):
    """Classified failure of a resolve or select operation"""

    def __init__(self, kind: ErrorKind, message: str, cause: Optional[str] = None, **params: Any):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause
        # Interpolation values for the localized message (e.g. format_id)
        self.params = params

    @property
    def status_code(self) -> int:
        return STATUS_CODES.get(self.kind, 400)

    @property
    def i18n_key(self) -> str:
        return f"error.{self.kind.value}"

    def to_detail(self, message: Optional[str] = None) -> Dict[str, str]:
        """Payload for HTTPException.detail; never includes the raw cause"""
        return {"kind": self.kind.value, "message": message or self.message}

    def __repr__(self) -> str:
        return f"ResolutionError(kind={self.kind.value!r}, message={self.message!r})"


def to_http_exception(error: ResolutionError, translate: Callable[..., str]) -> HTTPException:
    """HTTPException carrying the localized message for a classified failure"""
    message = translate(error.i18n_key, default=error.message, **error.params)
    return HTTPException(status_code=error.status_code, detail=error.to_detail(message))


class ExtractionFailure(Exception):
    """Raised by an extractor with the tool's raw error text"""

    def __init__(self, raw_message: str):
        super().__init__(raw_message)
        self.raw_message = raw_message
