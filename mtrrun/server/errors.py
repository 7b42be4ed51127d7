# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Collector Error Handling — Unified error taxonomy.

Every error carries the HTTP status it maps to. Responses are bare text.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import PlainTextResponse

logger = logging.getLogger("mtrrun.api")


class MetricError(Exception):
    """Base collector error with its HTTP mapping."""

    def __init__(self, code: str, message: str, status_code: int = 500):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(MetricError):
    def __init__(self, message: str):
        super().__init__(code="VALIDATION_ERROR", message=message, status_code=400)


class NotFoundError(MetricError):
    def __init__(self, metric_type: str, name: str):
        self.metric_type = metric_type
        self.name = name
        super().__init__(
            code="NOT_FOUND",
            message=f"{metric_type} metric by name={name} not found",
            status_code=404,
        )


class AlreadyExistsError(MetricError):
    def __init__(self, metric_type: str, name: str):
        self.metric_type = metric_type
        self.name = name
        super().__init__(
            code="ALREADY_EXISTS",
            message=f"{metric_type} metric by name={name} already exists",
            status_code=500,
        )


class UnknownTypeError(MetricError):
    def __init__(self, metric_type: str):
        self.metric_type = metric_type
        super().__init__(
            code="UNKNOWN_TYPE",
            message=f"unknown metric type. Expected gauge or counter. Actual: {metric_type}",
            status_code=501,
        )


class InternalError(MetricError):
    def __init__(self, message: str = "internal server error"):
        super().__init__(code="INTERNAL_ERROR", message=message, status_code=500)


async def metric_error_handler(request: Request, exc: MetricError) -> PlainTextResponse:
    """Global exception handler for MetricError."""
    trace_id = getattr(request.state, "trace_id", None)
    logger.warning(
        "%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code,
        extra={"trace_id": trace_id},
    )
    return PlainTextResponse(exc.message, status_code=exc.status_code)
