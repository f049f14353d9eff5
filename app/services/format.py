import logging
from typing import List, Optional

from app.core.errors import ErrorKind, ResolutionError
from app.models.internal import DIRECT_FORMAT_ID, DownloadIntent, Format, RequestClass, VideoInfo
from app.models.response import FormatEntry, FormatListResponse

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER = "mp4"
LISTED_CONTAINERS = ("mp4", "webm")
UNTITLED = "Untitled Video"


def _quality_key(f: Format):
    return (f.height or 0, f.bitrate or 0)


def _bitrate_key(f: Format):
    return f.bitrate or 0


class FormatSelector:
    """Pick one variant URL out of a resolved VideoInfo.

    All methods are pure: they never mutate the VideoInfo and never call the
    extractor. Sorting is stable, so equal keys keep the extractor's order.
    """

    @staticmethod
    def pick(info: VideoInfo, intent: DownloadIntent) -> str:
        """Dispatch on the request class"""
        if intent.request_class is RequestClass.DIRECT:
            return FormatSelector.pick_direct(info)
        if intent.request_class is RequestClass.BEST_AUDIO:
            return FormatSelector.pick_best_audio(info)
        if intent.request_class is RequestClass.EXPLICIT:
            return FormatSelector.pick_by_id(info, intent.format_id)
        return FormatSelector.pick_default(info)

    @staticmethod
    def pick_default(info: VideoInfo) -> str:
        """
        Best complete mp4.

        Audio+video completeness outranks resolution: a 1080p video-only mp4
        loses to a 360p mp4 carrying both tracks.
        """
        if info.direct_url and not info.formats:
            logger.debug("Using top-level direct URL (no formats listed)")
            return info.direct_url

        complete = [
            f for f in info.formats
            if f.container == DEFAULT_CONTAINER and f.has_video and f.has_audio and f.url
        ]
        if complete:
            best = sorted(complete, key=_quality_key, reverse=True)[0]
            logger.debug(f"Selected best MP4 format: {best.id or 'N/A'} ({best.height or 'N/A'}p)")
            return best.url

        # Fallback: first mp4 with a URL, codecs ignored
        for f in info.formats:
            if f.container == DEFAULT_CONTAINER and f.url:
                logger.debug(f"Selected fallback MP4 format: {f.id or 'N/A'}")
                return f.url

        raise ResolutionError(
            ErrorKind.NO_SUITABLE_FORMAT,
            "Could not find a suitable MP4 download link for this video.",
        )

    @staticmethod
    def pick_by_id(info: VideoInfo, format_id: Optional[str]) -> str:
        # Ids are not guaranteed unique; the first match wins
        match = next((f for f in info.formats if f.id == format_id), None)
        if match is not None and match.url:
            return match.url
        raise FormatSelector._format_not_found(format_id)

    @staticmethod
    def pick_direct(info: VideoInfo) -> str:
        if info.direct_url:
            return info.direct_url
        raise FormatSelector._format_not_found(DIRECT_FORMAT_ID)

    @staticmethod
    def pick_best_audio(info: VideoInfo) -> str:
        audio_only = [
            f for f in info.formats
            if f.is_audio_only and f.url and f.bitrate is not None
        ]
        if audio_only:
            return sorted(audio_only, key=_bitrate_key, reverse=True)[0].url

        # Fallback: any stream with audio, muxed or without a known bitrate
        with_audio = [f for f in info.formats if f.has_audio and f.url]
        if with_audio:
            return sorted(with_audio, key=_bitrate_key, reverse=True)[0].url

        raise ResolutionError(
            ErrorKind.NO_AUDIO_STREAM,
            "Could not find an audio stream for this video.",
        )

    @staticmethod
    def _format_not_found(format_id: Optional[str]) -> ResolutionError:
        return ResolutionError(
            ErrorKind.FORMAT_NOT_FOUND,
            f"Could not find a download link for the selected format ({format_id}). Try another format.",
            format_id=format_id,
        )

    @staticmethod
    def is_listed(f: Format) -> bool:
        return bool(f.url) and (f.container in LISTED_CONTAINERS or f.has_audio)

    @staticmethod
    def describe(f: Format) -> FormatEntry:
        """Display entry for one format"""
        resolution = f.resolution_label
        if resolution is None and f.width is not None and f.height is not None:
            resolution = f"{f.width}x{f.height}"

        label = f"{(f.container or 'unknown').upper()} - {f.resolution_label or f.note or f.id or 'unknown'}"
        if f.is_audio_only:
            label += " (Audio Only)"

        return FormatEntry(
            id=f.id,
            label=label,
            resolution=resolution,
            container=f.container,
            note=f.note,
            file_size=f.file_size,
            bitrate=f.bitrate,
            audio_codec=f.audio_codec,
            video_codec=f.video_codec,
        )

    @staticmethod
    def list_formats(info: VideoInfo) -> FormatListResponse:
        """Formats offered to the caller, in extractor order"""
        entries: List[FormatEntry] = [
            FormatSelector.describe(f) for f in info.formats if FormatSelector.is_listed(f)
        ]

        if not entries and info.direct_url:
            # Sources exposing a single stream instead of a variant list
            entries.append(FormatEntry(
                id=DIRECT_FORMAT_ID,
                label=f"{info.direct_ext.upper() if info.direct_ext else 'Direct'} - {info.title or 'Direct Link'}",
                resolution=info.title or "Direct Link",
                container=info.direct_ext or "unknown",
                note="Direct Download Link",
            ))

        return FormatListResponse(title=info.title or UNTITLED, formats=entries)
