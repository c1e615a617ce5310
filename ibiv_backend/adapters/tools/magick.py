"""
ImageMagick adapter: resize a frame and composite it over a checkerboard.
"""
import asyncio
from typing import List, Optional, Union

from ...config import CHECKERBOARD_SIZE, THUMBNAIL_SIZE
from ...shared import CompositeError, get_logger
from .process import ExternalTool, PipelineStage, spawn_stage

logger = get_logger(__name__)

# Either an fd carrying image bytes (read as "-") or a file path
ComposeSource = Union[int, str]


class Magick(ExternalTool):
    """
    Thumbnail compositor.

    Layer (a) is the source resized to the thumbnail footprint, layer (b) a
    generated checkerboard leveled down to 75% and resized to the same
    footprint. `dstover` puts (b) behind (a) so transparency shows through as
    the usual checker pattern. Output is JPEG on stdout.
    """

    names = ("magick", "convert")

    def __init__(
        self,
        bin_name: str = "magick",
        thumbnail_size: Optional[int] = None,
        checkerboard_size: Optional[int] = None,
    ):
        self.thumbnail_size = int(thumbnail_size or THUMBNAIL_SIZE)
        self.checkerboard_size = int(checkerboard_size or CHECKERBOARD_SIZE)
        super().__init__(bin_name)

    def build_compose_cmd(self, input_spec: str) -> List[str]:
        footprint = f"{self.thumbnail_size}x{self.thumbnail_size}"
        pattern = f"{self.checkerboard_size}x{self.checkerboard_size}"
        return [
            self.executable,
            "(", input_spec, "-resize", footprint, ")",
            "(", "-size", pattern, "tile:pattern:checkerboard", "-level", "0%,75%", "-resize", footprint, ")",
            "-compose", "dstover",
            "-composite",
            "jpeg:-",
        ]

    async def compose(self, source: ComposeSource) -> PipelineStage:
        """
        Start the compositor reading from `source`.

        An int is taken as a readable fd wired to stdin; a str as the path of a
        static image. Stdout is a pipe the caller drains. Raises CompositeError
        when magick cannot start.
        """
        if not self._available:
            raise CompositeError(f"magick not found ({self.bin})")
        if isinstance(source, int):
            cmd = self.build_compose_cmd("-")
            stdin = source
        else:
            cmd = self.build_compose_cmd(source)
            stdin = asyncio.subprocess.DEVNULL
        try:
            return await spawn_stage("magick", cmd, stdin=stdin, stdout=asyncio.subprocess.PIPE)
        except OSError as exc:
            raise CompositeError(f"cannot start magick: {exc}") from exc
