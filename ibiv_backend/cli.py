"""
Command line entry point: classify the given files, then serve the viewer.
"""
from __future__ import annotations

import argparse
import asyncio
import sys
import webbrowser
from typing import Any, Optional, Sequence

from aiohttp import web

from .config import KEYFRAME_STRATEGIES, KEYFRAME_STRATEGY, AppConfig
from .deps import build_services
from .features.media import build_registry
from .routes import build_app, default_defaults_path
from .routes.core import generate_token
from .shared import UnreadableFileError, get_logger, sanitize_error_message

logger = get_logger(__name__)

DEFAULT_LISTEN = "127.0.0.1:0"


def parse_listen(value: str) -> tuple[str, int]:
    """Split `host:port`; IPv6 hosts may be bracketed (`[::1]:8080`)."""
    raw = str(value or "").strip()
    host, sep, port_text = raw.rpartition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected host:port, got {raw!r}")
    host = host.strip("[]") or "127.0.0.1"
    try:
        port = int(port_text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port in {raw!r}") from None
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range in {raw!r}")
    return host, port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ibiv", description="Browser-based image and video viewer.")
    parser.add_argument("files", nargs="*", help="media files to show")
    parser.add_argument(
        "--defaults",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="load the bundled default configuration",
    )
    parser.add_argument(
        "-c", "--config",
        action="append",
        default=[],
        dest="configs",
        metavar="FILE",
        help="configuration script for the front end (repeatable)",
    )
    parser.add_argument(
        "--auto-launch",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="open the viewer in a browser",
    )
    parser.add_argument(
        "--auto-exit",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="stop the server when the viewer asks to exit",
    )
    parser.add_argument("--token", default="", help="authentication token (random when empty)")
    parser.add_argument(
        "-l", "--listen",
        type=parse_listen,
        default=DEFAULT_LISTEN,
        metavar="HOST:PORT",
        help=f"listen address (default {DEFAULT_LISTEN})",
    )
    parser.add_argument(
        "--keyframe-strategy",
        choices=KEYFRAME_STRATEGIES,
        default=KEYFRAME_STRATEGY,
        help="how the thumbnail frame of videos and GIFs is chosen",
    )
    return parser


def read_configs(config_files: Sequence[str], use_defaults: bool) -> tuple[str, ...]:
    """
    Load config script contents in order, bundled defaults first.

    Raises OSError for the first file that cannot be read.
    """
    paths = ([default_defaults_path()] if use_defaults else []) + list(config_files)
    contents = []
    for path in paths:
        with open(path, encoding="utf-8") as handle:
            contents.append(handle.read())
    return tuple(contents)


def _format_url(address: Any, token: str) -> str:
    host, port = address[0], address[1]
    if ":" in host:
        host = f"[{host}]"
    return f"http://{host}:{port}/#token={token}"


async def serve(
    config: AppConfig,
    services: dict[str, Any],
    host: str,
    port: int,
    *,
    auto_launch: bool = True,
) -> None:
    exit_event = asyncio.Event()
    app = build_app(config, services, exit_event=exit_event)
    runner = web.AppRunner(app)
    await runner.setup()
    try:
        site = web.TCPSite(runner, host, port)
        await site.start()
        url = _format_url(runner.addresses[0], config.token)
        print(f"Serving application on {url}", flush=True)
        if auto_launch:
            await asyncio.to_thread(webbrowser.open, url)
        await exit_event.wait()
        logger.info("Shutting down")
    finally:
        await runner.cleanup()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    host, port = args.listen

    try:
        registry = build_registry(args.files)
    except UnreadableFileError as exc:
        logger.error("Cannot detect media type: %s", exc)
        return 1

    try:
        configs = read_configs(args.configs, args.defaults)
    except OSError as exc:
        logger.error("Cannot read configuration: %s", sanitize_error_message(exc, "read failed"))
        return 1

    config = AppConfig(
        token=args.token or generate_token(),
        configs=configs,
        auto_exit=args.auto_exit,
        keyframe_strategy=args.keyframe_strategy,
    )
    services = build_services(config, registry)
    if not services.ok:
        logger.error("Cannot start: %s", services.error)
        return 1

    try:
        asyncio.run(serve(config, services.data or {}, host, port, auto_launch=args.auto_launch))
    except OSError as exc:
        logger.error("Cannot listen on %s:%s: %s", host, port, exc)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
