"""Application entry point for the cupcake chat logger."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.socket_config import lookup_socket_address, parse_domain
from adapters.socketio_transport import TransportHooks, connect, disconnect, join_channel
from adapters.transcript_file import TranscriptFile
from client import build_client
from core.channel import EventChannel
from core.config import LoggerConfig
from core.consumer import IngestionConsumer
from core.errors import ShutdownError, StartupError
from core.shutdown import shutdown

__version__ = "0.1.0"

NAME = "CUPCAKE"
FONT = "tarty-1"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _build_handlers(config: dict, level: int) -> list[logging.Handler]:
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/cupcake.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def _configure_logging(config: dict, level_override: Optional[str] = None) -> None:
    if not config.get("enabled", True):
        return

    level_name = str(level_override or config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    handlers = _build_handlers(config, level)
    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


async def _wait_for_interrupt() -> None:
    """Block until SIGINT/SIGTERM; return at once if signals are unavailable."""

    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    registered = []
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop.set)
        except (NotImplementedError, RuntimeError) as exc:
            LOGGER.error("Unable to listen to shutdown signal: %s", exc)
            break
        registered.append(signum)
    else:
        await stop.wait()
        LOGGER.debug("Received shutdown signal")

    for signum in registered:
        loop.remove_signal_handler(signum)


async def _run_logger(config: LoggerConfig) -> None:
    # Lookup failures abort before any queue or transcript exists.
    address = await lookup_socket_address(config.domain, config.channel)

    channel = EventChannel(config.queue_capacity)
    hooks = TransportHooks(channel)
    terminator = channel.sender()
    client = build_client()
    hooks.register(client)

    transcript: Optional[TranscriptFile] = None
    try:
        await connect(client, hooks, address, config.connect_timeout)
        if not await join_channel(client, config.channel):
            return

        transcript = TranscriptFile.create(config.output_dir, config.channel)
        consumer = IngestionConsumer(channel, transcript)
        consumer_task = asyncio.create_task(consumer.run())

        await _wait_for_interrupt()
        await shutdown(terminator, consumer_task)
    finally:
        # The consumer has stopped (or never started), so nothing writes
        # to the transcript past this point.
        if transcript is not None:
            transcript.close()
        await hooks.close()
        await terminator.close()
        try:
            await disconnect(client)
        except ShutdownError as exc:
            LOGGER.error("%s", exc)


def _domain_arg(value: str) -> str:
    try:
        return parse_domain(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cupcake",
        description="Write a CyTube channel's chat to a tab-separated transcript.",
    )
    parser.add_argument("domain", type=_domain_arg, help="CyTube server domain or URL.")
    parser.add_argument("channel", help="CyTube channel name.")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Application logging level (overrides config.json).",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for transcript files (overrides config.json).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    _print_banner()
    _configure_logging(settings.LOGGING or {}, args.log_level)

    config = LoggerConfig(
        domain=args.domain,
        channel=args.channel,
        output_dir=args.output_dir or settings.OUTPUT_DIR,
        connect_timeout=settings.CONNECT_TIMEOUT,
        queue_capacity=settings.QUEUE_CAPACITY,
    )
    LOGGER.info("Starting cupcake for %s/%s", config.domain, config.channel)

    try:
        asyncio.run(_run_logger(config))
    except StartupError as exc:
        LOGGER.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
