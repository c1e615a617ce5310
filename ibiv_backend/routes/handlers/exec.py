"""
Command execution endpoint used by front-end config scripts.

The token gate is the only protection: anyone holding the token can run
commands as the server user.
"""
import asyncio
import os
from typing import Any, Optional, Union

from aiohttp import web

from ibiv_backend.config import EXEC_TIMEOUT
from ibiv_backend.shared import ErrorCode, Result, get_logger

from ..core import _json_response, _read_json

logger = get_logger(__name__)

CommandSpec = Union[list[str], str]


def _parse_command(body: dict) -> Result[CommandSpec]:
    cmd = body.get("cmd")
    if isinstance(cmd, str):
        if not cmd.strip():
            return Result.Err(ErrorCode.INVALID_INPUT, "cmd is empty")
        return Result.Ok(cmd)
    if isinstance(cmd, list):
        if not cmd:
            return Result.Err(ErrorCode.INVALID_INPUT, "cmd is empty")
        if not all(isinstance(part, str) for part in cmd):
            return Result.Err(ErrorCode.INVALID_INPUT, "cmd items must be strings")
        return Result.Ok(list(cmd))
    return Result.Err(ErrorCode.INVALID_INPUT, "cmd must be a list of strings or a string")


async def _start(cmd: CommandSpec) -> asyncio.subprocess.Process:
    kwargs: dict[str, Any] = {
        "stdin": asyncio.subprocess.DEVNULL,
        "stdout": asyncio.subprocess.PIPE,
        "stderr": asyncio.subprocess.PIPE,
    }
    if isinstance(cmd, str):
        return await asyncio.create_subprocess_shell(cmd, **kwargs)
    return await asyncio.create_subprocess_exec(*cmd, close_fds=os.name != "nt", **kwargs)


async def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


async def run_command(cmd: CommandSpec, timeout: Optional[float] = None) -> dict[str, Any]:
    """
    Run `cmd` to completion and report its outcome.

    A command that cannot start reports exitCode -1 with the error text in
    stderr. `failed` is true for a non-zero exit, a start failure or a timeout.
    """
    limit = EXEC_TIMEOUT if timeout is None else timeout
    try:
        process = await _start(cmd)
    except OSError as exc:
        logger.warning("exec failed to start %r: %s", cmd, exc)
        return {"command": cmd, "exitCode": -1, "stdout": "", "stderr": str(exc), "failed": True}

    try:
        if limit and limit > 0:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=limit)
        else:
            stdout, stderr = await process.communicate()
    except asyncio.TimeoutError:
        await _kill(process)
        return {
            "command": cmd,
            "exitCode": process.returncode,
            "stdout": "",
            "stderr": f"timed out after {limit}s",
            "failed": True,
        }
    finally:
        if process.returncode is None:
            await _kill(process)

    returncode = process.returncode if process.returncode is not None else -1
    failed = returncode != 0
    stderr_text = stderr.decode("utf-8", errors="replace")
    if failed and not stderr_text:
        stderr_text = f"exit status {returncode}"
    return {
        "command": cmd,
        "exitCode": returncode,
        "stdout": stdout.decode("utf-8", errors="replace"),
        "stderr": stderr_text,
        "failed": failed,
    }


def register_exec_routes(routes: web.RouteTableDef) -> None:
    @routes.post("/exec")
    async def exec_command(request: web.Request) -> web.Response:
        body = await _read_json(request)
        if not body.ok:
            return _json_response(body, status=400)
        parsed = _parse_command(body.data or {})
        if not parsed.ok:
            return _json_response(parsed, status=400)
        logger.info("exec: %r", parsed.data)
        return web.json_response(await run_command(parsed.data))
