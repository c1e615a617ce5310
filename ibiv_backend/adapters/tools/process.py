"""
Process collaborator primitives: executable resolution, OS pipes wiring
two children together, and a handle for one running pipeline stage.
"""
from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path
from typing import Any, Optional, Sequence

from ...shared import get_logger

logger = get_logger(__name__)


class ExternalTool:
    """
    Base adapter for one external executable.

    Resolves the configured binary once and refuses anything that does not
    look like the expected tool (not an arbitrary command string).
    """

    names: tuple[str, ...] = ()

    def __init__(self, bin_name: str):
        self.bin = bin_name
        self._resolved_bin: Optional[str] = None
        self._available = self._check_available()

    def _resolve_executable(self, bin_name: str) -> Optional[str]:
        raw = (bin_name or "").strip()
        if not self._is_safe_executable_token(raw):
            return None
        resolved = self._resolve_executable_path(raw)
        if not resolved:
            return None
        return resolved if self._is_expected_name(resolved) else None

    @staticmethod
    def _is_safe_executable_token(raw: str) -> bool:
        if not raw:
            return False
        if "\x00" in raw or "\n" in raw or "\r" in raw:
            return False
        if any(ch in raw for ch in ("&", "|", ";", ">", "<")):
            return False
        return True

    @staticmethod
    def _resolve_executable_path(raw: str) -> Optional[str]:
        resolved = shutil.which(raw)
        if resolved:
            return resolved
        try:
            candidate = Path(raw)
            if candidate.is_file():
                return str(candidate.resolve(strict=True))
        except (OSError, RuntimeError, ValueError):
            return None
        return None

    def _is_expected_name(self, resolved: str) -> bool:
        name = Path(resolved).name.lower()
        return any(name.startswith(prefix) for prefix in self.names)

    def _check_available(self) -> bool:
        resolved = self._resolve_executable(self.bin)
        if not resolved:
            return False
        self._resolved_bin = resolved
        return True

    def is_available(self) -> bool:
        return self._available

    @property
    def executable(self) -> str:
        return self._resolved_bin or self.bin


class Pipe:
    """An OS pipe; the write end feeds one child's stdout, the read end another's stdin."""

    def __init__(self) -> None:
        self.read_fd: Optional[int]
        self.write_fd: Optional[int]
        self.read_fd, self.write_fd = os.pipe()

    def close_read(self) -> None:
        if self.read_fd is not None:
            fd, self.read_fd = self.read_fd, None
            os.close(fd)

    def close_write(self) -> None:
        if self.write_fd is not None:
            fd, self.write_fd = self.write_fd, None
            os.close(fd)

    def close(self) -> None:
        try:
            self.close_write()
        finally:
            self.close_read()

    @property
    def closed(self) -> bool:
        return self.read_fd is None and self.write_fd is None


def open_pipe() -> Pipe:
    return Pipe()


class PipelineStage:
    """A running child process owned by exactly one request."""

    def __init__(self, name: str, process: asyncio.subprocess.Process):
        self.name = name
        self.process = process

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode

    @property
    def stdout(self) -> Optional[asyncio.StreamReader]:
        return self.process.stdout

    async def wait(self) -> int:
        return await self.process.wait()

    async def terminate(self) -> int:
        """Kill the process if it is still running, then reap it."""
        if self.process.returncode is None:
            try:
                self.process.kill()
            except ProcessLookupError:
                pass
        return await self.process.wait()

    def __repr__(self) -> str:
        return f"<PipelineStage {self.name} pid={self.process.pid} rc={self.process.returncode}>"


async def spawn_stage(
    name: str,
    cmd: Sequence[str],
    *,
    stdin: Any = None,
    stdout: Any = None,
    stderr: Any = None,
) -> PipelineStage:
    """
    Start `cmd` as a pipeline stage.

    Raises OSError (e.g. FileNotFoundError) when the process cannot be started;
    callers translate it into their own error type.
    """
    logger.debug("Starting %s: %s", name, " ".join(cmd))
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdin=stdin,
        stdout=stdout,
        stderr=stderr,
        close_fds=os.name != "nt",
    )
    return PipelineStage(name, process)
