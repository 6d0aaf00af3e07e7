# src/slack_todo/health/server.py

"""
HTTP health server for external uptime monitors.

- GET /        liveness text
- GET /health  JSON status including a store ping (503 when the store is down)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse

from ..core.state import AppState

logger = logging.getLogger(__name__)


def create_health_app(state: AppState) -> FastAPI:
    app_name = str(getattr(state.settings, "app_name", "slack-todo"))
    app = FastAPI(title=app_name, docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Liveness endpoint"""
        return f"{app_name} is running!"

    @app.get("/health")
    def health_check() -> JSONResponse:
        """Health check endpoint for monitoring"""
        # Sync endpoint: FastAPI runs it in a worker thread, the store ping may block.
        store_ok = state.task_store.ping()
        return JSONResponse(
            status_code=200 if store_ok else 503,
            content={
                "status": "healthy" if store_ok else "unhealthy",
                "app": app_name,
                "store": "ok" if store_ok else "unreachable",
            },
        )

    return app


@dataclass
class HealthServerRunner:
    server: uvicorn.Server
    thread: threading.Thread

    def stop(self) -> None:
        self.server.should_exit = True

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_health_in_background(state: AppState) -> HealthServerRunner | None:
    settings = state.settings
    if not getattr(settings, "health_enabled", True):
        logger.info("Health server disabled, not starting.")
        return None

    config = uvicorn.Config(
        create_health_app(state),
        host=settings.host,
        port=int(settings.port),
        log_config=None,  # keep our logging_setup handlers
        access_log=False,
    )
    server = uvicorn.Server(config)

    t = threading.Thread(target=server.run, name="health-server", daemon=True)
    t.start()
    logger.info("Health server listening on %s:%s", settings.host, settings.port)
    return HealthServerRunner(server=server, thread=t)
