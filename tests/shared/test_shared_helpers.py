"""
Tests for ibiv_shared: result.py, errors.py, log.py, time.py.
"""
from __future__ import annotations

import logging

import pytest

from ibiv_shared import errors as errors_mod
from ibiv_shared import log as log_mod
from ibiv_shared import time as time_mod
from ibiv_shared import (
    CompositeError,
    DurationParseError,
    ErrorCode,
    IbivError,
    NoKeyframesError,
    ProbeError,
    Result,
    SeekTarget,
)


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def test_sanitize_error_message_masks_paths() -> None:
    msg = errors_mod.sanitize_error_message(RuntimeError("cannot open /home/me/secret/clip.mp4"), "Generic error")
    assert "[path]" in msg
    assert "/home/me" not in msg
    assert msg.startswith("Generic error:")


def test_sanitize_error_message_returns_fallback_for_empty() -> None:
    assert errors_mod.sanitize_error_message("", "Fallback") == "Fallback"
    assert errors_mod.sanitize_error_message(None, "Fallback") == "Fallback"


def test_error_taxonomy_codes() -> None:
    assert issubclass(NoKeyframesError, ProbeError)
    assert issubclass(DurationParseError, ProbeError)
    assert issubclass(CompositeError, IbivError)
    assert NoKeyframesError("x").code is ErrorCode.NO_KEYFRAMES
    assert CompositeError("x").code is ErrorCode.COMPOSITE_ERROR


def test_result_ok_and_err() -> None:
    ok = Result.Ok(3, source="test")
    assert ok.ok and ok.code == "OK" and ok.data == 3
    assert ok.meta == {"source": "test"}

    err = Result.Err(ErrorCode.TOOL_MISSING, "magick not found", tool="magick")
    assert not err.ok
    assert err.code == "TOOL_MISSING"
    assert err.data is None
    assert err.error == "magick not found"
    assert err.meta == {"tool": "magick"}


def test_seek_target_defaults_to_pts() -> None:
    assert SeekTarget(10).unit == "pts"


def test_get_logger_strips_package_prefix() -> None:
    logger = log_mod.get_logger("ibiv_backend.features.thumbnails.pipeline")
    assert logger.name == "ibiv.features.thumbnails.pipeline"
    assert logger.propagate is False
    assert any(isinstance(f, log_mod.CorrelationFilter) for f in logger.filters)


def test_level_tag_formatter_includes_request_id() -> None:
    record = logging.LogRecord("ibiv.test", logging.INFO, __file__, 1, "hello", None, None)
    record.request_id = "abc123"
    line = log_mod.LevelTagFormatter().format(record)
    assert "[abc123]" in line
    assert line.endswith("hello")


def test_correlation_filter_reads_context() -> None:
    token = log_mod.request_id_var.set("rid-1")
    try:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
        assert log_mod.CorrelationFilter().filter(record)
        assert record.request_id == "rid-1"
    finally:
        log_mod.request_id_var.reset(token)


def test_log_success_uses_success_level() -> None:
    logger = log_mod.get_logger("tests.shared")
    handler = _ListHandler()
    logger.addHandler(handler)
    try:
        log_mod.log_success(logger, "ready")
    finally:
        logger.removeHandler(handler)
    assert handler.records[0].levelname == "SUCCESS"
    assert handler.records[0].getMessage() == "ready"


def test_timer_logs_elapsed_at_debug() -> None:
    logger = log_mod.get_logger("tests.timer")
    logger.setLevel(logging.DEBUG)
    handler = _ListHandler()
    logger.addHandler(handler)
    try:
        with time_mod.timer("op", logger):
            pass
    finally:
        logger.removeHandler(handler)
        logger.setLevel(logging.INFO)
    assert handler.records[0].levelno == logging.DEBUG
    assert handler.records[0].getMessage().startswith("op finished in ")


def test_timer_logs_when_block_raises() -> None:
    logger = log_mod.get_logger("tests.timer")
    logger.setLevel(logging.DEBUG)
    handler = _ListHandler()
    logger.addHandler(handler)
    try:
        with pytest.raises(RuntimeError):
            with time_mod.timer("failing op", logger):
                raise RuntimeError("boom")
    finally:
        logger.removeHandler(handler)
        logger.setLevel(logging.INFO)
    assert "failing op finished in" in handler.records[0].getMessage()
