# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
mtrrun Collector Server — FastAPI application.

Entry point: uvicorn mtrrun.server.main:app --host 127.0.0.1 --port 8080
         or: python -m mtrrun.server.main   (the `mtrrun-server` script)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from mtrrun.core.config import get_server_settings
from mtrrun.core.logging import setup_logging
from mtrrun.server.errors import MetricError, metric_error_handler
from mtrrun.server.handlers import router as metrics_router
from mtrrun.server.middleware import RecoveryMiddleware, TraceMiddleware
from mtrrun.server.repository import MetricMemCache
from mtrrun.server.service import MetricService

logger = logging.getLogger("mtrrun.server")

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown hooks."""
    logger.info("Collector server ready")
    yield
    # State is volatile; nothing to flush
    logger.info("Collector server stopped, %s", app.state.metric_repo.stats())


def create_app(repo: Optional[MetricMemCache] = None) -> FastAPI:
    """Build the collector app around a (possibly pre-filled) repository."""
    repo = repo or MetricMemCache()

    app = FastAPI(
        title="mtrrun collector",
        description="In-memory metrics collector",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.metric_repo = repo
    app.state.metric_service = MetricService(repo)

    # ── Middleware (last added runs first) ────────────────────
    app.add_middleware(RecoveryMiddleware)
    app.add_middleware(TraceMiddleware)

    # ── Error Handlers ────────────────────────────────────────
    app.add_exception_handler(MetricError, metric_error_handler)

    @app.get("/health", tags=["system"])
    async def health():
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": "mtrrun-collector",
            "version": VERSION,
            "metrics": app.state.metric_repo.stats(),
        }

    # ── Routes ────────────────────────────────────────────────
    app.include_router(metrics_router)
    return app


app = create_app()


def main() -> None:
    import uvicorn

    settings = get_server_settings()
    setup_logging(settings.LOG_LEVEL)
    logger.info("Collector server starting on %s:%d", settings.HOST, settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
