"""
Tool detection helpers for ffprobe, ffmpeg and ImageMagick.
Cached detection to avoid repeated subprocess calls.
"""
import re
import shutil
import subprocess
from typing import Any, Dict, Optional, Tuple

from ibiv_backend.config import (
    FFMPEG_MIN_VERSION,
    FFPROBE_MIN_VERSION,
    MAGICK_MIN_VERSION,
    get_tool_paths,
)
from ibiv_backend.shared import get_logger

logger = get_logger(__name__)

TOOL_NAMES: Tuple[str, ...] = ("ffprobe", "ffmpeg", "magick")

_MIN_VERSIONS: Dict[str, str] = {
    "ffprobe": FFPROBE_MIN_VERSION,
    "ffmpeg": FFMPEG_MIN_VERSION,
    "magick": MAGICK_MIN_VERSION,
}

# Cache tool availability (None = not checked, True/False = result)
_TOOL_CACHE: Dict[str, Optional[bool]] = {name: None for name in TOOL_NAMES}

# Cache tool versions
_TOOL_VERSIONS: Dict[str, Optional[str]] = {name: None for name in TOOL_NAMES}


def parse_tool_version(value: Optional[str]) -> Tuple[int, ...]:
    if not value:
        return ()
    match = re.search(r"\d+(?:[.-]\d+)*", value)
    if not match:
        return ()
    return tuple(int(part) for part in re.findall(r"\d+", match.group(0)))


def version_satisfies_minimum(actual: Optional[str], minimum: str) -> bool:
    if not minimum:
        return True
    minimum_parts = parse_tool_version(minimum)
    if not minimum_parts:
        return True
    actual_parts = parse_tool_version(actual or "")
    if not actual_parts:
        return False
    length = max(len(actual_parts), len(minimum_parts))
    padded_actual = list(actual_parts) + [0] * (length - len(actual_parts))
    padded_minimum = list(minimum_parts) + [0] * (length - len(minimum_parts))
    return tuple(padded_actual) >= tuple(padded_minimum)


def _enforce_min_version(name: str, actual: Optional[str], minimum: str) -> bool:
    if not minimum:
        return True
    if version_satisfies_minimum(actual, minimum):
        return True
    logger.warning(
        "%s version %s does not meet minimum required %s",
        name,
        actual or "<unknown>",
        minimum,
    )
    return False


def _run_command(cmd: list[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        timeout=2,
        check=False,
    )


def _first_line(text: str) -> str:
    return text.split("\n")[0].strip() if text else ""


def has_tool(name: str) -> bool:
    """Check (once) whether the configured binary for `name` runs."""
    cached = _TOOL_CACHE.get(name)
    if cached is not None:
        return cached

    tool_bin = get_tool_paths().get(name) or name
    try:
        if shutil.which(tool_bin) is None:
            logger.debug("%s binary not found in PATH: %s", name, tool_bin)
        result = _run_command([tool_bin, "-version"])
        available = result.returncode == 0
        _TOOL_CACHE[name] = available

        if available:
            version = _first_line(result.stdout)
            _TOOL_VERSIONS[name] = version
            if not _enforce_min_version(name, version, _MIN_VERSIONS.get(name, "")):
                _TOOL_CACHE[name] = False
                return False
            logger.info("%s detected: %s", name, version)
        else:
            logger.warning("%s not found or failed to start: %s", name, result.stderr.strip())

        return available
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.warning("%s detection failed: %s", name, exc)
        _TOOL_CACHE[name] = False
        return False


def has_ffprobe() -> bool:
    return has_tool("ffprobe")


def has_ffmpeg() -> bool:
    return has_tool("ffmpeg")


def has_magick() -> bool:
    return has_tool("magick")


def get_tool_status() -> Dict[str, Any]:
    """
    Get the status of all tools.
    Returns: {
        "ffprobe": bool,
        "ffmpeg": bool,
        "magick": bool,
        "versions": {"ffprobe": str | null, ...}
    }
    """
    status: Dict[str, Any] = {name: has_tool(name) for name in TOOL_NAMES}
    status["versions"] = {name: _TOOL_VERSIONS.get(name) for name in TOOL_NAMES}
    return status


def reset_tool_cache():
    """Reset tool detection cache (for testing or manual refresh)."""
    global _TOOL_CACHE, _TOOL_VERSIONS
    _TOOL_CACHE = {name: None for name in TOOL_NAMES}
    _TOOL_VERSIONS = {name: None for name in TOOL_NAMES}
