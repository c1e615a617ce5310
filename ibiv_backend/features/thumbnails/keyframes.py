"""
Representative-frame selection for time-based media.

Two strategies:
  - "keyframes": tertile sample over the distinct keyframe pts of the first
    video stream. Index (n-1)//3 avoids both black lead-in frames and
    end credits.
  - "duration": seek to one fifth of the container duration.
"""
from __future__ import annotations

import math
import re
from typing import Sequence

from ...adapters.tools import FFProbe
from ...config import KEYFRAME_STRATEGIES
from ...shared import DurationParseError, NoKeyframesError, SeekTarget, get_logger

logger = get_logger(__name__)

# `pts,flags` CSV rows; keyframe flags start with "K". Output may carry noise lines.
_KEYFRAME_PTS_RE = re.compile(r"(\d+),K")

DURATION_FRACTION = 5


def parse_keyframe_pts(output: str) -> tuple[int, ...]:
    """Extract keyframe pts from probe output, sorted ascending and deduplicated."""
    values = sorted(int(m.group(1)) for m in _KEYFRAME_PTS_RE.finditer(output or ""))
    unique: list[int] = []
    for value in values:
        if not unique or value != unique[-1]:
            unique.append(value)
    return tuple(unique)


def select_keyframe_index(count: int) -> int:
    if count <= 0:
        raise NoKeyframesError("no keyframes to select from")
    if count <= 2:
        return 0
    if count == 3:
        return 1
    return (count - 1) // 3


def select_keyframe_pts(timestamps: Sequence[int]) -> int:
    """Pick the representative pts from an ascending, deduplicated sequence."""
    return timestamps[select_keyframe_index(len(timestamps))]


def parse_duration(output: str) -> float:
    raw = (output or "").strip().splitlines()
    value = raw[0].strip() if raw else ""
    if not value:
        raise DurationParseError("ffprobe reported no duration")
    try:
        duration = float(value)
    except ValueError as exc:
        raise DurationParseError(f"non-numeric duration: {value!r}") from exc
    if not math.isfinite(duration) or duration < 0:
        raise DurationParseError(f"invalid duration: {value!r}")
    return duration


class KeyframeSelector:
    """Chooses one seek target per time-based media file."""

    def __init__(self, ffprobe: FFProbe, strategy: str = "keyframes"):
        if strategy not in KEYFRAME_STRATEGIES:
            raise ValueError(f"unknown keyframe strategy: {strategy!r}")
        self.ffprobe = ffprobe
        self.strategy = strategy

    async def select_timestamp(self, path: str) -> SeekTarget:
        """
        Probe `path` and return the seek target.

        Raises ProbeError (or its NoKeyframesError / DurationParseError
        subclasses). Never retried: a file that fails to probe keeps failing.
        """
        if self.strategy == "duration":
            duration = parse_duration(await self.ffprobe.read_duration(path))
            target = SeekTarget(duration / DURATION_FRACTION, "seconds")
        else:
            timestamps = parse_keyframe_pts(await self.ffprobe.list_keyframes(path))
            if not timestamps:
                raise NoKeyframesError(f"no keyframes found in {path}")
            target = SeekTarget(select_keyframe_pts(timestamps), "pts")
            logger.debug("%d keyframe(s) in %s, selected pts %s", len(timestamps), path, target.value)
        return target
