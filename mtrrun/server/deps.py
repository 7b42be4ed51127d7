# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
API Dependencies — FastAPI dependency injection.
"""

from __future__ import annotations

from fastapi import Request

from mtrrun.server.errors import InternalError
from mtrrun.server.service import MetricService


def get_metric_service(request: Request) -> MetricService:
    """Return the MetricService attached to the running app."""
    service = getattr(request.app.state, "metric_service", None)
    if service is None:
        raise InternalError("metric service is not configured")
    return service
