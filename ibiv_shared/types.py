"""
Shared types, enums, and constants.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Final, Literal


class ErrorCode(str, Enum):
    """Standardized error codes (string enum)."""

    # Client / validation
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_JSON = "INVALID_JSON"
    NOT_FOUND = "NOT_FOUND"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    FORBIDDEN = "FORBIDDEN"

    # Feature / service availability
    TOOL_MISSING = "TOOL_MISSING"
    TIMEOUT = "TIMEOUT"

    # Media / pipeline
    UNREADABLE_FILE = "UNREADABLE_FILE"
    PROBE_ERROR = "PROBE_ERROR"
    NO_KEYFRAMES = "NO_KEYFRAMES"
    DURATION_PARSE_ERROR = "DURATION_PARSE_ERROR"
    DECODE_START_ERROR = "DECODE_START_ERROR"
    COMPOSITE_ERROR = "COMPOSITE_ERROR"

    # Tool / parsing
    EXEC_ERROR = "EXEC_ERROR"
    PARSE_ERROR = "PARSE_ERROR"


class MediaCategory(str, Enum):
    """Downstream thumbnail path for a media entry."""

    IMAGE = "image"
    ANIMATED_IMAGE = "animated_image"
    VIDEO = "video"

    @property
    def is_time_based(self) -> bool:
        return self in (MediaCategory.ANIMATED_IMAGE, MediaCategory.VIDEO)


# Generic "could not tell" sniff result
UNKNOWN_BINARY_MIME: Final[str] = "application/octet-stream"


@dataclass(frozen=True)
class SeekTarget:
    """Where to grab the representative frame: a stream pts, or an offset in seconds."""

    value: float
    unit: Literal["pts", "seconds"] = "pts"
