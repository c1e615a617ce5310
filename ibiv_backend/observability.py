"""
Observability helpers (request id + timing) for aiohttp routes.
"""

from __future__ import annotations

import os
import time
from typing import Any
from uuid import uuid4

from aiohttp import web

from .shared import get_logger, request_id_var
from .utils import env_float

# OSError errno codes that indicate client disconnect (not server-side issues)
_CLIENT_DISCONNECT_ERRNO = frozenset({
    10053,  # WSAECONNABORTED (Windows)
    10054,  # WSAECONNRESET (Windows)
    104,    # ECONNRESET (Linux/macOS)
    32,     # EPIPE (Linux/macOS)
    9,      # EBADF (bad file descriptor, connection closed)
})


def is_client_disconnect(exc: BaseException) -> bool:
    """
    Check if an exception represents a benign client disconnect.
    """
    if isinstance(exc, (ConnectionResetError, BrokenPipeError, ConnectionAbortedError)):
        return True
    if isinstance(exc, OSError):
        if getattr(exc, "errno", None) in _CLIENT_DISCONNECT_ERRNO:
            return True
        if getattr(exc, "winerror", None) in _CLIENT_DISCONNECT_ERRNO:
            return True
    return False

logger = get_logger(__name__)

_APPKEY_OBS_INSTALLED = web.AppKey("ibiv_observability_installed", bool)
REQUEST_ID_KEY = web.RequestKey("ibiv_request_id", str)
DURATION_MS_KEY = web.RequestKey("ibiv_duration_ms", float)

MS_PER_S = 1000.0
_DEFAULT_SLOW_MS = 2000.0


def _new_request_id() -> str:
    return uuid4().hex


def _get_request_id(request: web.Request) -> str:
    rid = (request.headers.get("X-Request-ID") or "").strip()
    return rid or _new_request_id()


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


def _should_log(status: int | None, duration_ms: float) -> bool:
    if status is not None and status >= 400:
        return True
    if _env_flag("IBIV_OBS_LOG_ALL", default=False):
        return True
    slow_ms = env_float("IBIV_OBS_SLOW_MS", _DEFAULT_SLOW_MS)
    return duration_ms >= slow_ms


@web.middleware
async def request_context_middleware(request: web.Request, handler):
    """Add request-id correlation and lightweight request logging."""
    if _env_flag("IBIV_OBS_DISABLE", default=False):
        return await handler(request)

    rid = _get_request_id(request)
    request[REQUEST_ID_KEY] = rid
    token = request_id_var.set(rid)
    start = time.perf_counter()
    status: int | None = None
    error: str | None = None
    try:
        response = await handler(request)
        status = int(getattr(response, "status", 200) or 200)
        _attach_request_id_header(response, rid)
        return response
    except web.HTTPException as exc:
        status = int(getattr(exc, "status", 500) or 500)
        exc.headers["X-Request-ID"] = rid
        raise
    except Exception as exc:
        status = 500
        error = f"{exc.__class__.__name__}: {exc}"
        raise
    finally:
        duration_ms = (time.perf_counter() - start) * MS_PER_S
        request[DURATION_MS_KEY] = duration_ms
        _emit_request_log(request, status=status, duration_ms=duration_ms, error=error)
        request_id_var.reset(token)


def _attach_request_id_header(response: Any, rid: str) -> None:
    # Streamed responses have already sent their headers
    if getattr(response, "prepared", False):
        return
    response.headers["X-Request-ID"] = rid


def build_request_log_fields(request: web.Request, *, response_status: int | None) -> dict[str, Any]:
    return {
        "method": request.method,
        "path": request.path,
        "status": response_status,
        "duration_ms": round(float(request.get(DURATION_MS_KEY) or 0.0), 2),
    }


def _emit_request_log(
    request: web.Request,
    *,
    status: int | None,
    duration_ms: float,
    error: str | None,
) -> None:
    if not _should_log(status, duration_ms):
        return
    fields = build_request_log_fields(request, response_status=status)
    message = "%(method)s %(path)s -> %(status)s in %(duration_ms)sms" % fields
    if error:
        message = f"{message} ({error})"
    if status is not None and status >= 500:
        logger.error(message)
    elif status is not None and status >= 400:
        logger.warning(message)
    else:
        logger.info(message)


def ensure_observability(app: web.Application) -> None:
    """
    Install middleware once.
    """
    if app.get(_APPKEY_OBS_INSTALLED):
        return
    app[_APPKEY_OBS_INSTALLED] = True
    app.middlewares.append(request_context_middleware)
