import asyncio
import json
import os
import sys

import pytest

from app.config.settings import ExtractorConfig
from app.core.errors import ErrorKind, ExtractionFailure
from app.services.classifier import classify
from app.services.ytdlp import CompletedProcess, YTDLPCommandBuilder, YtDlpExtractor, resolve_binary_path

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class FakeExecutor:
    """Stands in for SubprocessExecutor; records commands"""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.commands = []

    async def run(self, cmd, timeout):
        self.commands.append((cmd, timeout))
        if self.error is not None:
            raise self.error
        return self.result


def make_extractor(executor, timeout=30.0):
    return YtDlpExtractor(YTDLPCommandBuilder("yt-dlp", socket_timeout=10), timeout=timeout, executor=executor)


def test_info_command():
    cmd = YTDLPCommandBuilder("/opt/yt-dlp", socket_timeout=7).build_info_command(URL)

    assert cmd[0] == "/opt/yt-dlp"
    assert "--dump-single-json" in cmd
    assert "--no-playlist" in cmd
    assert cmd[cmd.index("--socket-timeout") + 1] == "7"
    assert cmd[-2:] == ["--", URL]
    assert "--retries" not in cmd


def test_binary_from_config_wins(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert resolve_binary_path(ExtractorConfig(binary_path="/custom/yt-dlp")) == "/custom/yt-dlp"


def test_bundled_binary_is_preferred_over_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    name = "yt-dlp.exe" if sys.platform == "win32" else "yt-dlp"
    (tmp_path / "bin").mkdir()
    (tmp_path / "bin" / name).write_text("")

    assert resolve_binary_path(ExtractorConfig()) == os.path.join(os.getcwd(), "bin", name)


def test_falls_back_to_bare_name_when_nothing_found(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("app.services.ytdlp.shutil.which", lambda name: None)

    assert resolve_binary_path(ExtractorConfig()) in ("yt-dlp", "yt-dlp.exe")


@pytest.mark.asyncio
async def test_extractor_returns_parsed_json():
    payload = {"title": "t", "formats": []}
    executor = FakeExecutor(CompletedProcess(0, json.dumps(payload).encode(), b""))

    assert await make_extractor(executor, timeout=12.5)(URL) == payload
    assert executor.commands[0][1] == 12.5


@pytest.mark.asyncio
async def test_non_zero_exit_raises_with_stderr():
    stderr = b"ERROR: [generic] Unsupported URL: https://example.com/\n"
    executor = FakeExecutor(CompletedProcess(1, b"", stderr))

    with pytest.raises(ExtractionFailure) as exc_info:
        await make_extractor(executor)(URL)
    assert exc_info.value.raw_message == "ERROR: [generic] Unsupported URL: https://example.com/"


@pytest.mark.asyncio
async def test_missing_binary_classifies_as_tool_unavailable():
    executor = FakeExecutor(error=FileNotFoundError(2, "No such file or directory", "yt-dlp"))

    with pytest.raises(ExtractionFailure) as exc_info:
        await make_extractor(executor)(URL)
    assert classify(exc_info.value.raw_message).kind is ErrorKind.TOOL_UNAVAILABLE


@pytest.mark.asyncio
async def test_garbage_stdout_classifies_as_extraction_failed():
    executor = FakeExecutor(CompletedProcess(0, b"<html>", b""))

    with pytest.raises(ExtractionFailure) as exc_info:
        await make_extractor(executor)(URL)
    assert classify(exc_info.value.raw_message).kind is ErrorKind.EXTRACTION_FAILED


@pytest.mark.asyncio
async def test_timeout_propagates():
    executor = FakeExecutor(error=asyncio.TimeoutError())

    with pytest.raises(asyncio.TimeoutError):
        await make_extractor(executor)(URL)


@pytest.mark.asyncio
async def test_version_probe():
    ok = FakeExecutor(CompletedProcess(0, b"2025.01.15\n", b""))
    missing = FakeExecutor(error=FileNotFoundError(2, "No such file or directory"))

    assert await make_extractor(ok).version() == "2025.01.15"
    assert await make_extractor(missing).version() == "unknown"
