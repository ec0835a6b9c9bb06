from __future__ import annotations

import asyncio
import time
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from uptime_checks.recorder import tail_lines
from uptime_checks.settings import MonitorSettings


logger = structlog.get_logger(__name__)


def _tail_response(path: str, limit: int, *, name: str) -> PlainTextResponse:
    try:
        lines = tail_lines(path, limit)
    except FileNotFoundError as e:
        logger.warning("tail_file_missing", file=name, path=path)
        raise HTTPException(status_code=404, detail=f"{name}_not_found") from e
    except OSError as e:
        logger.error("tail_file_unreadable", file=name, path=path, error=str(e))
        raise HTTPException(status_code=503, detail=f"{name}_unreadable") from e
    body = "".join(f"{line}\n" for line in lines)
    return PlainTextResponse(body)


def create_app(settings: MonitorSettings | None = None) -> FastAPI:
    app = FastAPI(title="Uptime Monitor", version="0.1.0")
    app.state.settings = settings or MonitorSettings()

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"ok": True, "ts": time.time()}

    @app.get("/logs", response_class=PlainTextResponse)
    def logs() -> PlainTextResponse:
        s: MonitorSettings = app.state.settings
        return _tail_response(s.log_path, s.tail_lines, name="log_file")

    @app.get("/metrics", response_class=PlainTextResponse)
    def metrics() -> PlainTextResponse:
        s: MonitorSettings = app.state.settings
        return _tail_response(s.metrics_path, s.tail_lines, name="metrics_file")

    # Mounted last so the routes above take precedence over static files.
    app.mount(
        "/",
        StaticFiles(directory=app.state.settings.static_dir, html=True, check_dir=False),
        name="static",
    )
    return app


def build_server(settings: MonitorSettings) -> uvicorn.Server:
    config = uvicorn.Config(
        create_app(settings),
        host=settings.host,
        port=int(settings.port),
        log_level="info",
    )
    return uvicorn.Server(config)


async def serve_until(server: uvicorn.Server, monitor_task: asyncio.Task) -> None:
    """Run ``server`` alongside the monitor; stop it once the monitor task ends."""
    server_task = asyncio.create_task(server.serve())
    logger.info(
        "webserver_started",
        logs_url=f"http://localhost:{server.config.port}/logs",
        metrics_url=f"http://localhost:{server.config.port}/metrics",
    )
    done, _pending = await asyncio.wait({server_task, monitor_task}, return_when=asyncio.FIRST_COMPLETED)
    if monitor_task in done:
        server.should_exit = True
        await server_task
        monitor_task.result()
        return

    logger.error("webserver_stopped", reason="server exited before the monitor")
    monitor_task.cancel()
    try:
        await monitor_task
    except asyncio.CancelledError:
        pass
    raise RuntimeError("Web interface stopped unexpectedly")
