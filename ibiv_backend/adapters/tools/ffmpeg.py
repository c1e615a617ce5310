"""
FFmpeg adapter: decode exactly one still frame to a pipe.
"""
import asyncio
from typing import List

from ...shared import DecodeStartError, SeekTarget, get_logger
from .process import ExternalTool, PipelineStage, spawn_stage

logger = get_logger(__name__)


class FFmpeg(ExternalTool):
    """Frame extractor backed by ffmpeg; output is a lossless PNG on stdout."""

    names = ("ffmpeg",)

    def __init__(self, bin_name: str = "ffmpeg"):
        super().__init__(bin_name)

    def build_extract_cmd(self, path: str, target: SeekTarget) -> List[str]:
        if target.unit == "pts":
            # Keyframe-only decode, first frame at or after the selected pts
            return [
                self.executable,
                "-loglevel", "error",
                "-skip_frame", "nokey",
                "-i", path,
                "-an",
                "-vsync", "0",
                "-vf", f"select=gte(pts\\,{int(target.value)})",
                "-frames", "1",
                "-f", "image2pipe",
                "-vcodec", "png",
                "-",
            ]
        return [
            self.executable,
            "-loglevel", "error",
            "-ss", f"{float(target.value):.3f}",
            "-i", path,
            "-an",
            "-frames:v", "1",
            "-f", "image2pipe",
            "-vcodec", "png",
            "-",
        ]

    async def extract_frame(self, path: str, target: SeekTarget, stdout_fd: int) -> PipelineStage:
        """
        Start the decoder writing one PNG frame into `stdout_fd`.

        The caller owns the returned stage and must reap it once the reader of
        the pipe is done. Raises DecodeStartError when ffmpeg cannot start.
        """
        if not self._available:
            raise DecodeStartError(f"ffmpeg not found ({self.bin})")
        cmd = self.build_extract_cmd(path, target)
        try:
            return await spawn_stage("ffmpeg", cmd, stdin=asyncio.subprocess.DEVNULL, stdout=stdout_fd)
        except OSError as exc:
            raise DecodeStartError(f"cannot start ffmpeg: {exc}") from exc
