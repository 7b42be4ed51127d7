# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
API Middleware — Trace ID propagation and fault recovery.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

logger = logging.getLogger("mtrrun.api")


class TraceMiddleware(BaseHTTPMiddleware):
    """
    Generates or propagates X-Trace-Id header for every request.
    Also logs request duration.
    """

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get("X-Trace-Id", str(uuid.uuid4()))
        request.state.trace_id = trace_id

        start = time.time()
        response: Response = await call_next(request)
        elapsed = (time.time() - start) * 1000

        response.headers["X-Trace-Id"] = trace_id
        logger.info(
            "[api] %s %s → %d (%.0fms)",
            request.method, request.url.path, response.status_code, elapsed,
            extra={"trace_id": trace_id},
        )
        return response


class RecoveryMiddleware(BaseHTTPMiddleware):
    """Turns any unhandled exception into a plain 500 so the server keeps serving."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "[api] unhandled error on %s %s", request.method, request.url.path,
                extra={"trace_id": getattr(request.state, "trace_id", None)},
            )
            return PlainTextResponse("internal server error", status_code=500)
