import asyncio
import json
import logging
import os
import shutil
import sys
from typing import Any, Dict, List, NamedTuple, Optional

from app.config.settings import ExtractorConfig, config
from app.core.errors import ExtractionFailure

logger = logging.getLogger(__name__)

STDERR_MAX_CHARS = 2000


class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes


class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def run(cmd: List[str], timeout: Optional[float]) -> CompletedProcess:
        """
        Run subprocess with timeout and proper cleanup.
        The child is killed on timeout and on task cancellation.
        """
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            stdin=asyncio.subprocess.DEVNULL
        )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
            return CompletedProcess(returncode=process.returncode, stdout=stdout, stderr=stderr)
        except BaseException:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise


def resolve_binary_path(settings: Optional[ExtractorConfig] = None) -> str:
    """
    Locate the yt-dlp executable.

    Order: configured path, a bundled binary under <cwd>/<bundled_dir>,
    then whatever "yt-dlp" resolves to on PATH.
    """
    settings = settings or config.extractor

    if settings.binary_path:
        return settings.binary_path

    binary_name = "yt-dlp.exe" if sys.platform == "win32" else "yt-dlp"
    bundled = os.path.join(os.getcwd(), settings.bundled_dir, binary_name)
    if os.path.isfile(bundled):
        logger.info(f"Using bundled yt-dlp binary found at: {bundled}")
        return bundled

    on_path = shutil.which(binary_name)
    if on_path:
        return on_path

    logger.warning(f"yt-dlp binary not found at {bundled} or on PATH; falling back to '{binary_name}'")
    return binary_name


class YTDLPCommandBuilder:
    """Build yt-dlp commands"""

    def __init__(self, binary: str, socket_timeout: int):
        self.binary = binary
        self.socket_timeout = socket_timeout

    def build_info_command(self, url: str) -> List[str]:
        """Build command for fetching video info as one JSON document"""
        return [
            self.binary,
            "--dump-single-json",
            "--no-playlist",
            "--no-warnings",
            "--socket-timeout", str(self.socket_timeout),
            "--",
            url,
        ]

    def build_version_command(self) -> List[str]:
        return [self.binary, "--version"]


class YtDlpExtractor:
    """
    Extraction capability backed by the yt-dlp executable.

    Calling it returns the raw info dict or raises ExtractionFailure with the
    tool's own error text; classification happens in the resolver. A run
    exceeding ``timeout`` raises asyncio.TimeoutError.
    """

    def __init__(
        self,
        builder: YTDLPCommandBuilder,
        timeout: Optional[float] = None,
        executor=SubprocessExecutor,
    ):
        self.builder = builder
        self.timeout = timeout
        self.executor = executor

    @classmethod
    def from_config(cls, settings: Optional[ExtractorConfig] = None) -> "YtDlpExtractor":
        settings = settings or config.extractor
        builder = YTDLPCommandBuilder(resolve_binary_path(settings), settings.socket_timeout)
        return cls(builder, timeout=settings.timeout_seconds)

    async def __call__(self, url: str) -> Dict[str, Any]:
        cmd = self.builder.build_info_command(url)
        try:
            result = await self.executor.run(cmd, timeout=self.timeout)
        except asyncio.TimeoutError:
            # TimeoutError is an OSError subclass on 3.11+
            raise
        except OSError as e:
            # FileNotFoundError/PermissionError text carries "No such file or directory" etc.
            raise ExtractionFailure(f"Command failed: {self.builder.binary}: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace").strip()
            raise ExtractionFailure(stderr[-STDERR_MAX_CHARS:] or f"Command failed with exit code {result.returncode}")

        try:
            return json.loads(result.stdout.decode(errors="replace"))
        except json.JSONDecodeError as e:
            raise ExtractionFailure(f"Failed to parse JSON metadata: {e}") from e

    async def version(self) -> str:
        """yt-dlp version string, or "unknown" when the binary cannot run"""
        try:
            result = await self.executor.run(self.builder.build_version_command(), timeout=10.0)
        except (OSError, asyncio.TimeoutError) as e:
            logger.warning(f"Could not determine yt-dlp version: {e}")
            return "unknown"
        if result.returncode != 0:
            return "unknown"
        return result.stdout.decode(errors="replace").strip() or "unknown"
