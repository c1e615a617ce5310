"""
Configuration for the ibiv backend.

Environment tunables are read once at import time. Per-run options coming
from the command line live in `AppConfig`, built once at startup.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .utils import env_bool

logger = logging.getLogger(__name__)


def _env_raw(*names: str, default: str | None = None) -> str | None:
    for name in names:
        if not name:
            continue
        val = os.getenv(name)
        if val is not None and str(val).strip() != "":
            return str(val).strip()
    return default


def _env_int(default: int, *names: str, min_value: int | None = None, max_value: int | None = None) -> int:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid integer for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_float(default: float, *names: str, min_value: float | None = None, max_value: float | None = None) -> float:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid float for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_bool(default: bool, *names: str) -> bool:
    for name in names:
        if name and name in os.environ:
            return env_bool(name, default)
    return default


# External tool overrides (portable vs. system-wide)
FFPROBE_BIN = _env_raw("IBIV_FFPROBE_BIN", "IBIV_FFPROBE_PATH", default="ffprobe")
FFMPEG_BIN = _env_raw("IBIV_FFMPEG_BIN", "IBIV_FFMPEG_PATH", default="ffmpeg")
MAGICK_BIN = _env_raw("IBIV_MAGICK_BIN", "IBIV_MAGICK_PATH", default="magick")

TOOL_LOCATIONS = {
    "ffprobe": FFPROBE_BIN,
    "ffmpeg": FFMPEG_BIN,
    "magick": MAGICK_BIN,
}

def get_tool_paths():
    """Return the configured external tool executables."""
    return TOOL_LOCATIONS.copy()

FFPROBE_MIN_VERSION = str(_env_raw("IBIV_FFPROBE_MIN_VERSION", default="") or "").strip()
FFMPEG_MIN_VERSION = str(_env_raw("IBIV_FFMPEG_MIN_VERSION", default="") or "").strip()
MAGICK_MIN_VERSION = str(_env_raw("IBIV_MAGICK_MIN_VERSION", default="") or "").strip()

# Tool timeouts (probe only; extraction and composition run until the client is gone)
FFPROBE_TIMEOUT = _env_float(30.0, "IBIV_FFPROBE_TIMEOUT", min_value=1.0, max_value=600.0)
EXEC_TIMEOUT = _env_float(0.0, "IBIV_EXEC_TIMEOUT", min_value=0.0, max_value=86400.0)

# Keyframe selection: "keyframes" (quantile over keyframe pts) or "duration" (duration / 5)
KEYFRAME_STRATEGIES = ("keyframes", "duration")
KEYFRAME_STRATEGY = str(_env_raw("IBIV_KEYFRAME_STRATEGY", default="keyframes") or "keyframes").lower()
if KEYFRAME_STRATEGY not in KEYFRAME_STRATEGIES:
    logger.warning("Unknown IBIV_KEYFRAME_STRATEGY=%r, using 'keyframes'", KEYFRAME_STRATEGY)
    KEYFRAME_STRATEGY = "keyframes"

# Thumbnail layout
THUMBNAIL_SIZE = _env_int(128, "IBIV_THUMBNAIL_SIZE", min_value=16, max_value=2048)
CHECKERBOARD_SIZE = _env_int(512, "IBIV_CHECKERBOARD_SIZE", min_value=16, max_value=8192)
STREAM_CHUNK_SIZE = _env_int(64 * 1024, "IBIV_STREAM_CHUNK_SIZE", min_value=1024, max_value=16 * 1024 * 1024)

# 0 keeps per-request process fan-out unbounded
THUMBNAIL_MAX_CONCURRENCY = _env_int(0, "IBIV_THUMBNAIL_MAX_CONCURRENCY", min_value=0, max_value=1024)

DEBUG = _env_bool(False, "IBIV_DEBUG")


@dataclass(frozen=True)
class AppConfig:
    """Immutable per-run configuration handed to the HTTP layer."""

    token: str
    configs: tuple[str, ...] = ()
    auto_exit: bool = True
    keyframe_strategy: str = KEYFRAME_STRATEGY
    static_dir: Optional[str] = None
    tool_paths: dict[str, str] = field(default_factory=get_tool_paths)
