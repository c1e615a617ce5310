"""
External tool status endpoint.
"""
import asyncio

from aiohttp import web

from ibiv_backend.shared import ErrorCode, Result, get_logger, sanitize_error_message
from ibiv_backend.tool_detect import get_tool_status

from ..core import _json_response

logger = get_logger(__name__)


def register_health_routes(routes: web.RouteTableDef) -> None:
    @routes.get("/tools/status")
    async def tools_status(request: web.Request) -> web.Response:
        try:
            status = await asyncio.to_thread(get_tool_status)
        except OSError as exc:
            logger.warning("Tool status check failed: %s", exc)
            return _json_response(
                Result.Err(ErrorCode.TOOL_MISSING, sanitize_error_message(exc, "Tool status check failed")),
                status=500,
            )
        return _json_response(Result.Ok(status))
