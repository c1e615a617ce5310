"""
Front-end configuration scripts and the exit hook.
"""
from aiohttp import web

from ibiv_backend.shared import get_logger

from ..core import EXIT_EVENT_KEY, get_app_config

logger = get_logger(__name__)


def register_config_routes(routes: web.RouteTableDef) -> None:
    @routes.get("/configs")
    async def get_configs(request: web.Request) -> web.Response:
        """Config file contents in load order (bundled defaults first when enabled)."""
        return web.json_response(list(get_app_config(request).configs))

    @routes.get("/exit")
    @routes.post("/exit")
    async def exit_viewer(request: web.Request) -> web.Response:
        if get_app_config(request).auto_exit:
            event = request.app.get(EXIT_EVENT_KEY)
            if event is not None:
                logger.info("Exit requested by client")
                event.set()
        return web.Response(status=200)
