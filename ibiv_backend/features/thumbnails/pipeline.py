"""
Thumbnail pipeline orchestration.

Per request:

    lookup -> classification (cached at startup)
        static image:  magick <path>               -> sink
        time-based:    ffprobe -> select pts/seek
                       ffmpeg -> pipe -> magick -  -> sink

Every child process and pipe end belongs to the request that created it and
is released on every exit path (probe failure, start failure, composer
failure, client disconnect or task cancellation). Cleanup runs LIFO: the
compositor is reaped before the decoder it reads from, and the pipe is closed
last.
"""
from __future__ import annotations

import asyncio
import contextlib
from contextlib import AsyncExitStack
from typing import AsyncIterator, Optional, Protocol

from ...adapters.tools import FFmpeg, Magick, Pipe, PipelineStage, open_pipe
from ...adapters.tools.magick import ComposeSource
from ...config import STREAM_CHUNK_SIZE, THUMBNAIL_MAX_CONCURRENCY
from ...shared import CompositeError, get_logger, timer
from ..media import MediaEntry
from .keyframes import KeyframeSelector

logger = get_logger(__name__)


class ThumbnailSink(Protocol):
    """Destination of the encoded thumbnail bytes (normally an HTTP response)."""

    async def begin(self) -> None:
        """Called once, right before the first chunk; commits status and headers."""
        ...

    async def write(self, data: bytes) -> None:
        ...


class ThumbnailPipeline:
    def __init__(
        self,
        selector: KeyframeSelector,
        ffmpeg: FFmpeg,
        magick: Magick,
        *,
        chunk_size: int = STREAM_CHUNK_SIZE,
        max_concurrency: int = THUMBNAIL_MAX_CONCURRENCY,
    ):
        self.selector = selector
        self.ffmpeg = ffmpeg
        self.magick = magick
        self.chunk_size = max(1, int(chunk_size))
        self._semaphore: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(max_concurrency) if max_concurrency and max_concurrency > 0 else None
        )

    @contextlib.asynccontextmanager
    async def _slot(self) -> AsyncIterator[None]:
        if self._semaphore is None:
            yield
            return
        async with self._semaphore:
            yield

    async def render(self, entry: MediaEntry, sink: ThumbnailSink) -> int:
        """
        Generate the thumbnail for `entry` and stream it into `sink`.

        Returns the number of bytes written. Raises ProbeError,
        DecodeStartError or CompositeError on failure; bytes already written
        to the sink stay written.
        """
        async with self._slot():
            with timer(f"thumbnail {entry.filename}", logger):
                return await self._render(entry, sink)

    async def _render(self, entry: MediaEntry, sink: ThumbnailSink) -> int:
        async with AsyncExitStack() as stack:
            decoder: Optional[PipelineStage] = None
            pipe: Optional[Pipe] = None
            source: ComposeSource = entry.path

            if entry.category.is_time_based:
                target = await self.selector.select_timestamp(entry.path)
                pipe = open_pipe()
                stack.callback(pipe.close)
                decoder = await self.ffmpeg.extract_frame(entry.path, target, pipe.write_fd)
                stack.push_async_callback(_reap, decoder)
                # The decoder holds the only write end now; EOF reaches the compositor when it exits
                pipe.close_write()
                source = pipe.read_fd

            composer = await self.magick.compose(source)
            stack.push_async_callback(_reap, composer)
            if pipe is not None:
                pipe.close_read()

            written = await self._stream(composer, sink)
            returncode = await composer.wait()
            if returncode != 0:
                raise CompositeError(f"magick exited with {returncode} for {entry.path} after {written} byte(s)")
            if written == 0:
                raise CompositeError(f"magick produced no output for {entry.path}")

            if decoder is not None:
                # The thumbnail is already streamed; a late decoder failure is only logged
                decoder_rc = await decoder.wait()
                if decoder_rc != 0:
                    logger.warning("ffmpeg exited with %s for %s", decoder_rc, entry.path)
            return written

    async def _stream(self, composer: PipelineStage, sink: ThumbnailSink) -> int:
        stdout = composer.stdout
        if stdout is None:
            raise CompositeError("magick stdout is not a pipe")
        written = 0
        while True:
            chunk = await stdout.read(self.chunk_size)
            if not chunk:
                return written
            if written == 0:
                await sink.begin()
            await sink.write(chunk)
            written += len(chunk)


async def _reap(stage: PipelineStage) -> None:
    if stage.returncode is not None:
        return
    returncode = await stage.terminate()
    logger.debug("Reaped %s (rc=%s)", stage.name, returncode)
