"""Thumbnail generation: keyframe selection and the extract/compose pipeline."""
from .keyframes import (
    KeyframeSelector,
    parse_duration,
    parse_keyframe_pts,
    select_keyframe_index,
    select_keyframe_pts,
)
from .pipeline import ThumbnailPipeline, ThumbnailSink

__all__ = [
    "KeyframeSelector",
    "ThumbnailPipeline",
    "ThumbnailSink",
    "parse_duration",
    "parse_keyframe_pts",
    "select_keyframe_index",
    "select_keyframe_pts",
]
