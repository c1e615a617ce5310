"""
Dependency injection - builds services.
Simple, debug-friendly DI without framework magic.
"""
from typing import Any, Optional

from .adapters.tools import FFmpeg, FFProbe, Magick
from .config import (
    FFMPEG_BIN,
    FFPROBE_BIN,
    FFPROBE_TIMEOUT,
    MAGICK_BIN,
    STREAM_CHUNK_SIZE,
    THUMBNAIL_MAX_CONCURRENCY,
    AppConfig,
)
from .features.media import MediaRegistry
from .features.thumbnails import KeyframeSelector, ThumbnailPipeline
from .shared import ErrorCode, Result, get_logger, log_success

logger = get_logger(__name__)


def _init_tools(tool_paths: dict[str, str]) -> tuple[FFProbe, FFmpeg, Magick]:
    ffprobe = FFProbe(bin_name=tool_paths.get("ffprobe") or FFPROBE_BIN or "ffprobe", timeout=FFPROBE_TIMEOUT)
    ffmpeg = FFmpeg(bin_name=tool_paths.get("ffmpeg") or FFMPEG_BIN or "ffmpeg")
    magick = Magick(bin_name=tool_paths.get("magick") or MAGICK_BIN or "magick")
    return ffprobe, ffmpeg, magick


def _log_tool_availability(ffprobe: FFProbe, ffmpeg: FFmpeg, magick: Magick) -> None:
    if ffprobe.is_available():
        log_success(logger, "ffprobe is available")
    else:
        logger.warning("ffprobe not found - video and GIF thumbnails will fail")
    if ffmpeg.is_available():
        log_success(logger, "ffmpeg is available")
    else:
        logger.warning("ffmpeg not found - video and GIF thumbnails will fail")
    if magick.is_available():
        log_success(logger, "ImageMagick is available")
    else:
        logger.warning("ImageMagick not found - no thumbnails will be generated")


def build_services(
    config: AppConfig,
    registry: MediaRegistry,
    *,
    chunk_size: Optional[int] = None,
    max_concurrency: Optional[int] = None,
) -> Result[dict[str, Any]]:
    """
    Build the per-run service graph.

    Returns:
        Result.Ok({"registry", "ffprobe", "ffmpeg", "magick", "selector", "pipeline"})
    """
    ffprobe, ffmpeg, magick = _init_tools(config.tool_paths)
    _log_tool_availability(ffprobe, ffmpeg, magick)
    try:
        selector = KeyframeSelector(ffprobe, strategy=config.keyframe_strategy)
    except ValueError as exc:
        return Result.Err(ErrorCode.INVALID_INPUT, str(exc))
    pipeline = ThumbnailPipeline(
        selector,
        ffmpeg,
        magick,
        chunk_size=STREAM_CHUNK_SIZE if chunk_size is None else chunk_size,
        max_concurrency=THUMBNAIL_MAX_CONCURRENCY if max_concurrency is None else max_concurrency,
    )
    return Result.Ok(
        {
            "registry": registry,
            "ffprobe": ffprobe,
            "ffmpeg": ffmpeg,
            "magick": magick,
            "selector": selector,
            "pipeline": pipeline,
        }
    )
