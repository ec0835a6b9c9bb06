from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import os
import platform
import socket
from typing import Sequence

import httpx
import structlog

from uptime_checks.config import ConfigError, MonitorConfig, load_config
from uptime_checks.monitor import run_monitor
from uptime_checks.notifier import notify
from uptime_checks.recorder import append_log_line, ensure_log_file
from uptime_checks.settings import MonitorSettings
from uptime_checks.webserver import build_server, serve_until


LOGGER = logging.getLogger("uptime-monitor")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="HTTP uptime and latency monitor")
    parser.add_argument("-v", dest="verbose", action="store_true", help="Verbose checks (log internal state)")
    parser.add_argument("-s", dest="single", action="store_true", help="Single run: one cycle, then exit")
    parser.add_argument("-t", dest="threshold", type=int, default=None, help="Latency threshold in ms (default 500)")
    parser.add_argument("-w", dest="webserver", action="store_true", help="Serve logs and metrics over HTTP")
    parser.add_argument("--config", default=None, help="Path to YAML config (default config.yaml)")
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (INFO, WARNING, ...)",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace, base: MonitorSettings | None = None) -> MonitorSettings:
    settings = base or MonitorSettings()
    overrides: dict[str, object] = {}
    if args.verbose:
        overrides["verbose"] = True
    if args.single:
        overrides["single"] = True
    if args.webserver:
        overrides["webserver"] = True
    if args.threshold is not None:
        overrides["threshold_ms"] = int(args.threshold)
    if args.config:
        overrides["config_path"] = str(args.config)
    return dataclasses.replace(settings, **overrides)


def configure_logging(level_name: str, *, verbose: bool) -> int:
    level = logging.DEBUG if verbose else getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # Webhook URLs carry their secret in the path.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return level


async def run(
    settings: MonitorSettings,
    config: MonitorConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    hostname = socket.gethostname()
    LOGGER.info(
        "Starting uptime monitor hostname=%s os=%s cpu_cores=%s",
        hostname,
        platform.system(),
        os.cpu_count(),
    )
    if settings.verbose:
        LOGGER.debug("Settings %s", settings)
        LOGGER.debug("Config servers=%s webhook_configured=%s", config.servers, bool(config.slack_url))
    append_log_line(settings.log_path, "INFO:", f"Starting uptime monitor hostname: {hostname}")

    async with httpx.AsyncClient(transport=transport) as client:
        await notify(
            client,
            config,
            f"INFO: Starting uptime monitor hostname: {hostname}",
            connectivity_url=settings.connectivity_url,
        )

        if settings.webserver:
            LOGGER.info("Running webserver mode host=%s port=%s", settings.host, settings.port)
            monitor_task = asyncio.create_task(run_monitor(client, config, settings))
            await serve_until(build_server(settings), monitor_task)
        else:
            LOGGER.info("Running console mode")
            await run_monitor(client, config, settings)

    LOGGER.info("Single run complete; exiting")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    settings = build_settings(args)
    configure_logging(args.log_level, verbose=settings.verbose)

    try:
        config = load_config(settings.config_path)
    except ConfigError as e:
        LOGGER.critical("FATAL: config load failed: %s", e)
        return 1

    try:
        ensure_log_file(settings.log_path)
    except OSError as e:
        LOGGER.critical("FATAL: opening log file %s: %s", settings.log_path, e)
        return 1

    try:
        return asyncio.run(run(settings, config))
    except KeyboardInterrupt:
        LOGGER.info("Interrupted; exiting")
        return 130
    except RuntimeError as e:
        LOGGER.critical("FATAL: %s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
