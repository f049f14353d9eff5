from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, validator

from app.models.internal import DownloadIntent


class FormatsRequest(BaseModel):
    # Kept as the verbatim string: it is the cache key, and HttpUrl would rewrite it
    url: str = Field(..., min_length=1, description="Media page URL")

    @validator("url")
    def validate_url_syntax(cls, v):
        """Validate URL syntax only"""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid URL provided.")
        return v


class DownloadLinkRequest(FormatsRequest):
    format_id: Optional[str] = Field(
        None,
        description='Format id from /formats, "direct" for the top-level link, "mp3" for best audio; omit for the default pick',
    )

    @validator("format_id")
    def validate_format_id(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Format ID must be selected.")
        return v

    def to_intent(self) -> DownloadIntent:
        """Convert to selection intent"""
        return DownloadIntent.from_format_id(self.format_id)
