"""
Application keys for per-run state stored on the aiohttp app.
"""
import asyncio
from typing import Any

from aiohttp import web

from ibiv_backend.config import AppConfig

APP_CONFIG_KEY: web.AppKey[AppConfig] = web.AppKey("ibiv_config", AppConfig)
SERVICES_KEY: web.AppKey[dict] = web.AppKey("ibiv_services", dict)
EXIT_EVENT_KEY: web.AppKey[asyncio.Event] = web.AppKey("ibiv_exit_event", asyncio.Event)


def get_app_config(request: web.Request) -> AppConfig:
    return request.app[APP_CONFIG_KEY]


def get_services(request: web.Request) -> dict[str, Any]:
    return request.app[SERVICES_KEY]
