"""Shared utilities for the ibiv media browser backend."""
from .errors import (
    CompositeError,
    DecodeStartError,
    DurationParseError,
    IbivError,
    NoKeyframesError,
    OutOfRangeError,
    ProbeError,
    UnreadableFileError,
    sanitize_error_message,
)
from .log import get_logger, log_success, request_id_var
from .result import Result
from .time import timer
from .types import UNKNOWN_BINARY_MIME, ErrorCode, MediaCategory, SeekTarget

__all__ = [
    "Result",
    "get_logger",
    "log_success",
    "timer",
    "ErrorCode",
    "MediaCategory",
    "UNKNOWN_BINARY_MIME",
    "SeekTarget",
    "request_id_var",
    "sanitize_error_message",
    "IbivError",
    "UnreadableFileError",
    "ProbeError",
    "NoKeyframesError",
    "DurationParseError",
    "DecodeStartError",
    "CompositeError",
    "OutOfRangeError",
]
