"""Backend-facing alias for shared utilities."""

from __future__ import annotations

import ibiv_shared as _root_shared

Result = _root_shared.Result
ErrorCode = _root_shared.ErrorCode
MediaCategory = _root_shared.MediaCategory
get_logger = _root_shared.get_logger
log_success = _root_shared.log_success
request_id_var = _root_shared.request_id_var
sanitize_error_message = _root_shared.sanitize_error_message
timer = _root_shared.timer
UNKNOWN_BINARY_MIME = _root_shared.UNKNOWN_BINARY_MIME
SeekTarget = _root_shared.SeekTarget

IbivError = _root_shared.IbivError
UnreadableFileError = _root_shared.UnreadableFileError
ProbeError = _root_shared.ProbeError
NoKeyframesError = _root_shared.NoKeyframesError
DurationParseError = _root_shared.DurationParseError
DecodeStartError = _root_shared.DecodeStartError
CompositeError = _root_shared.CompositeError
OutOfRangeError = _root_shared.OutOfRangeError

__all__ = _root_shared.__all__
