import subprocess

from ibiv_backend import tool_detect
from ibiv_backend.tool_detect import parse_tool_version, version_satisfies_minimum


def test_parse_tool_version_extracts_digits() -> None:
    assert parse_tool_version("ffprobe version 6.0.0 Copyright (c) 2007-2023") == (6, 0, 0)
    assert parse_tool_version("Version: ImageMagick 7.1.1-29 Q16-HDRI") == (7, 1, 1, 29)
    assert parse_tool_version("") == ()


def test_version_satisfies_minimum_logic() -> None:
    assert version_satisfies_minimum("6.1", "6.0")
    assert not version_satisfies_minimum("5.1.2", "6.0")
    assert not version_satisfies_minimum(None, "1.0")
    assert version_satisfies_minimum("6.0.0", "")


def test_has_tool_caches_result(monkeypatch) -> None:
    calls = []

    def _run(cmd):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="ffmpeg version 6.1.1\n", stderr="")

    tool_detect.reset_tool_cache()
    monkeypatch.setattr(tool_detect, "_run_command", _run)
    try:
        assert tool_detect.has_ffmpeg()
        assert tool_detect.has_ffmpeg()
        assert len(calls) == 1
        assert tool_detect.get_tool_status()["versions"]["ffmpeg"] == "ffmpeg version 6.1.1"
    finally:
        tool_detect.reset_tool_cache()


def test_has_tool_handles_missing_binary(monkeypatch) -> None:
    def _run(cmd):
        raise FileNotFoundError(cmd[0])

    tool_detect.reset_tool_cache()
    monkeypatch.setattr(tool_detect, "_run_command", _run)
    try:
        status = tool_detect.get_tool_status()
        assert status["ffprobe"] is False
        assert status["magick"] is False
        assert status["versions"]["ffprobe"] is None
    finally:
        tool_detect.reset_tool_cache()


def test_min_version_marks_tool_unavailable(monkeypatch) -> None:
    def _run(cmd):
        return subprocess.CompletedProcess(cmd, 0, stdout="ffprobe version 4.4\n", stderr="")

    tool_detect.reset_tool_cache()
    monkeypatch.setattr(tool_detect, "_run_command", _run)
    monkeypatch.setitem(tool_detect._MIN_VERSIONS, "ffprobe", "5.0")
    try:
        assert tool_detect.has_ffprobe() is False
    finally:
        tool_detect.reset_tool_cache()
