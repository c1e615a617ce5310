"""Adapters for the external probing, decoding and compositing tools."""
from .ffmpeg import FFmpeg
from .ffprobe import FFProbe
from .magick import Magick
from .process import ExternalTool, Pipe, PipelineStage, open_pipe, spawn_stage

__all__ = [
    "ExternalTool",
    "FFProbe",
    "FFmpeg",
    "Magick",
    "Pipe",
    "PipelineStage",
    "open_pipe",
    "spawn_stage",
]
