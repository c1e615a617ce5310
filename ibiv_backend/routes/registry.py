"""
Application assembly: middlewares, API routes and the bundled front end.
"""
from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Optional

from aiohttp import web

from ibiv_backend.config import AppConfig
from ibiv_backend.observability import ensure_observability
from ibiv_backend.shared import get_logger

from .core import APP_CONFIG_KEY, EXIT_EVENT_KEY, SERVICES_KEY, _check_token, _empty_response
from .handlers import (
    register_config_routes,
    register_exec_routes,
    register_health_routes,
    register_media_routes,
)

logger = get_logger(__name__)

API_PREFIXES = ("/images", "/thumbnails", "/configs", "/exit", "/exec", "/tools")
WEB_DIR = Path(__file__).resolve().parents[1] / "web"


def _is_api_path(path: str) -> bool:
    for prefix in API_PREFIXES:
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


def _requires_auth(path: str) -> bool:
    return _is_api_path(path)


@web.middleware
async def security_headers_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    """Apply strict headers to API responses only; the front end is left alone."""
    response = await handler(request)
    if not _is_api_path(request.path or ""):
        return response
    # Streamed responses committed their headers already
    if response.prepared:
        return response
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Cache-Control", "no-store")
    return response


@web.middleware
async def auth_required_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    """Reject API requests that do not carry the run token."""
    if _requires_auth(request.path or ""):
        config = request.app[APP_CONFIG_KEY]
        if not _check_token(request, config.token):
            logger.warning("Rejected %s %s: bad or missing token", request.method, request.path)
            return _empty_response(403)
    return await handler(request)


def _install_security_middlewares(app: web.Application) -> None:
    app.middlewares.append(security_headers_middleware)
    app.middlewares.append(auth_required_middleware)


def register_all_routes() -> web.RouteTableDef:
    routes = web.RouteTableDef()
    register_media_routes(routes)
    register_config_routes(routes)
    register_exec_routes(routes)
    register_health_routes(routes)
    return routes


def _resolve_static_dir(config: AppConfig) -> Optional[Path]:
    raw = config.static_dir
    candidate = Path(raw) if raw else WEB_DIR
    return candidate if candidate.is_dir() else None


def _register_static(app: web.Application, static_dir: Path) -> None:
    index = static_dir / "index.html"

    async def get_index(request: web.Request) -> web.StreamResponse:
        if not index.is_file():
            raise web.HTTPNotFound()
        return web.FileResponse(index)

    app.router.add_get("/", get_index)
    app.router.add_static("/", str(static_dir), show_index=False)


def build_app(
    config: AppConfig,
    services: dict[str, Any],
    *,
    exit_event: Optional[asyncio.Event] = None,
) -> web.Application:
    """
    Build the aiohttp application for one viewer run.

    Middleware order: observability (outermost), security headers, token gate.
    """
    app = web.Application()
    app[APP_CONFIG_KEY] = config
    app[SERVICES_KEY] = services
    app[EXIT_EVENT_KEY] = exit_event if exit_event is not None else asyncio.Event()

    ensure_observability(app)
    _install_security_middlewares(app)

    app.add_routes(register_all_routes())
    static_dir = _resolve_static_dir(config)
    if static_dir is not None:
        _register_static(app, static_dir)
    else:
        logger.warning("No front-end assets found (%s); serving the API only", config.static_dir or WEB_DIR)
    logger.debug("Routes: %s", ", ".join(sorted({r.resource.canonical for r in app.router.routes() if r.resource})))
    return app


def default_defaults_path() -> str:
    return os.fspath(WEB_DIR / "defaults.js")
