"""
FFprobe adapter: keyframe packet timestamps and container duration.
"""
import asyncio
import os
from typing import List, Optional

from ...config import FFPROBE_TIMEOUT
from ...shared import ProbeError, get_logger
from .process import ExternalTool

logger = get_logger(__name__)


class FFProbe(ExternalTool):
    """
    FFprobe wrapper returning raw textual probe output.

    Raises ProbeError when the probe cannot run, times out or exits non-zero.
    Interpreting the text is the caller's job.
    """

    names = ("ffprobe",)

    def __init__(self, bin_name: str = "ffprobe", timeout: Optional[float] = None):
        """
        Initialize FFprobe adapter.

        Args:
            bin_name: FFprobe binary name or path
            timeout: Command timeout in seconds
        """
        self.timeout = float(timeout) if timeout is not None else float(FFPROBE_TIMEOUT)
        super().__init__(bin_name)

    def _validate_probe_path(self, path: str) -> str:
        value = str(path or "").strip()
        if not value:
            raise ProbeError("ffprobe path is empty")
        if value.startswith("-"):
            raise ProbeError(f"refusing to probe option-like path: {value!r}")
        if "\x00" in value or "\n" in value or "\r" in value:
            raise ProbeError("ffprobe path contains control characters")
        return value

    def build_keyframes_cmd(self, path: str) -> List[str]:
        return [
            self.executable,
            "-loglevel", "error",
            "-skip_frame", "nokey",
            "-select_streams", "v:0",
            "-show_entries", "packet=pts,flags",
            "-of", "csv=p=0",
            path,
        ]

    def build_duration_cmd(self, path: str) -> List[str]:
        return [
            self.executable,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            path,
        ]

    async def list_keyframes(self, path: str) -> str:
        """Return `pts,flags` CSV lines for the keyframe packets of the first video stream."""
        return await self._run(self.build_keyframes_cmd(self._validate_probe_path(path)), path)

    async def read_duration(self, path: str) -> str:
        """Return the container duration as printed by ffprobe (seconds, or `N/A`)."""
        return await self._run(self.build_duration_cmd(self._validate_probe_path(path)), path)

    async def _spawn_ffprobe_process(self, cmd: List[str]) -> asyncio.subprocess.Process:
        return await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            close_fds=os.name != "nt",
        )

    async def _run(self, cmd: List[str], path: str) -> str:
        if not self._available:
            raise ProbeError(f"ffprobe not found ({self.bin})")
        try:
            process = await self._spawn_ffprobe_process(cmd)
        except OSError as exc:
            raise ProbeError(f"cannot start ffprobe: {exc}") from exc

        try:
            stdout_b, stderr_b = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise ProbeError(f"ffprobe timeout after {self.timeout}s for {path}") from exc
        finally:
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()

        stdout = (stdout_b or b"").decode("utf-8", errors="replace")
        stderr = (stderr_b or b"").decode("utf-8", errors="replace").strip()
        if process.returncode != 0:
            logger.warning("ffprobe error for %s: %s", path, stderr)
            raise ProbeError(f"ffprobe exited with {process.returncode} for {path}: {stderr or 'no error output'}")
        if stderr:
            logger.debug("ffprobe stderr for %s: %s", path, stderr)
        return stdout
