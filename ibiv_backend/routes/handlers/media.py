"""
Media listing, original file download and thumbnail streaming.
"""
from __future__ import annotations

from typing import Optional

from aiohttp import web

from ibiv_backend.features.media import MediaRegistry
from ibiv_backend.features.thumbnails import ThumbnailPipeline
from ibiv_backend.observability import is_client_disconnect
from ibiv_backend.shared import IbivError, OutOfRangeError, get_logger

from ..core import _empty_response, get_services

logger = get_logger(__name__)

THUMBNAIL_CONTENT_TYPE = "image/jpeg"


def _parse_index(request: web.Request) -> Optional[int]:
    try:
        return int(str(request.match_info.get("index", "")).strip())
    except ValueError:
        return None


def _registry(request: web.Request) -> MediaRegistry:
    return get_services(request)["registry"]


class _ResponseSink:
    """
    Streams thumbnail bytes into a chunked response.

    Nothing is sent until the first chunk: a failure before that still lets
    the handler answer with a clean 500.
    """

    def __init__(self, request: web.Request):
        self.request = request
        self.response: Optional[web.StreamResponse] = None

    @property
    def started(self) -> bool:
        return self.response is not None

    async def begin(self) -> None:
        response = web.StreamResponse(status=200)
        response.content_type = THUMBNAIL_CONTENT_TYPE
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Cache-Control"] = "no-store"
        await response.prepare(self.request)
        self.response = response

    async def write(self, data: bytes) -> None:
        if self.response is None:
            await self.begin()
        assert self.response is not None
        await self.response.write(data)


def register_media_routes(routes: web.RouteTableDef) -> None:
    @routes.get("/images")
    async def list_images(request: web.Request) -> web.StreamResponse:
        return web.json_response(_registry(request).to_list())

    @routes.get("/images/{index}")
    @routes.get("/images/{index}/{name:.*}")
    async def get_image(request: web.Request) -> web.StreamResponse:
        index = _parse_index(request)
        if index is None:
            return _empty_response(400)
        try:
            entry = _registry(request).get(index)
        except OutOfRangeError:
            return _empty_response(404)
        return web.FileResponse(
            entry.path,
            headers={
                "Content-Type": entry.mime_type,
                "X-Content-Type-Options": "nosniff",
            },
        )

    @routes.get("/thumbnails/{index}")
    @routes.get("/thumbnails/{index}/{name:.*}")
    async def get_thumbnail(request: web.Request) -> web.StreamResponse:
        index = _parse_index(request)
        if index is None:
            return _empty_response(400)
        try:
            entry = _registry(request).get(index)
        except OutOfRangeError as exc:
            logger.debug("%s", exc)
            return _empty_response(404)

        pipeline: ThumbnailPipeline = get_services(request)["pipeline"]
        sink = _ResponseSink(request)
        try:
            written = await pipeline.render(entry, sink)
        except IbivError as exc:
            logger.error("Thumbnail failed for %s: %s", entry.path, exc)
            if sink.response is None:
                return _empty_response(500)
            return sink.response
        except OSError as exc:
            if not is_client_disconnect(exc):
                raise
            logger.debug("Client went away while streaming %s: %s", entry.path, exc)
            return sink.response if sink.response is not None else _empty_response(500)

        logger.debug("Thumbnail for %s: %d byte(s)", entry.filename, written)
        assert sink.response is not None
        await sink.response.write_eof()
        return sink.response
