# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Metrics API — Update, read and dashboard endpoints.

POST /update/{type}/{name}/{value}   upsert one metric       → "OK"
GET  /value/{type}/{name}            read one metric         → value text
GET  /                               HTML list of all metrics
"""

from __future__ import annotations

import re
from html import escape

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, PlainTextResponse

from mtrrun.server.deps import get_metric_service
from mtrrun.server.errors import (
    InternalError,
    MetricError,
    UnknownTypeError,
    ValidationError,
)
from mtrrun.server.models import (
    COUNTER,
    GAUGE,
    INT64_MAX,
    INT64_MIN,
    format_float,
    format_int,
)
from mtrrun.server.service import MetricService

router = APIRouter(tags=["metrics"])

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

DASHBOARD_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Metrics</title>
</head>
<body>
{items}
</body>
</html>
"""


def parse_gauge_value(raw: str) -> float:
    """Parse a gauge value as float; no surrounding spaces or digit separators."""
    if not raw or raw != raw.strip() or "_" in raw:
        raise ValidationError(f"unable to parse value. Expected: float. Actual: {raw}")
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"unable to parse value. Expected: float. Actual: {raw}")


def parse_counter_value(raw: str) -> int:
    """Parse a counter delta as a signed base-10 int64."""
    if not _INT_PATTERN.fullmatch(raw):
        raise ValidationError(f"unable to parse value. Expected: int. Actual: {raw}")
    value = int(raw)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValidationError(f"unable to parse value. Expected: int64. Actual: {raw}")
    return value


def _require_name(metric_name: str) -> None:
    if not metric_name:
        raise ValidationError("unable to parse name. Expected: string with length > 0")


@router.post("/update/{metric_type}/{metric_name}/{value}", response_class=PlainTextResponse)
async def update_metric(
    metric_type: str,
    metric_name: str,
    value: str,
    service: MetricService = Depends(get_metric_service),
):
    """Create or update one metric."""
    _require_name(metric_name)

    if metric_type == GAUGE:
        parsed = parse_gauge_value(value)
        write = service.put_gauge(metric_name, parsed)
    elif metric_type == COUNTER:
        parsed = parse_counter_value(value)
        write = service.put_counter(metric_name, parsed)
    else:
        raise UnknownTypeError(metric_type)

    try:
        await write
    except ValidationError:
        raise
    except MetricError as exc:
        raise InternalError(
            f"unable to update/create {metric_type} metric with name={metric_name} "
            f"and value={value}: {exc.message}"
        )
    return "OK"


@router.get("/value/{metric_type}/{metric_name}", response_class=PlainTextResponse)
async def get_metric(
    metric_type: str,
    metric_name: str,
    service: MetricService = Depends(get_metric_service),
):
    """Return the stored value of one metric as text."""
    _require_name(metric_name)

    if metric_type == GAUGE:
        gauge = await service.get_gauge(metric_name)
        return format_float(gauge.value)
    if metric_type == COUNTER:
        counter = await service.get_counter(metric_name)
        return format_int(counter.value)
    raise UnknownTypeError(metric_type)


@router.get("/", response_class=HTMLResponse)
async def dashboard(service: MetricService = Depends(get_metric_service)):
    """Render every stored metric as an HTML list."""
    try:
        rows = await service.get_all()
    except MetricError as exc:
        raise InternalError(f"unable to load metrics: {exc.message}")
    items = "\n".join(
        f"<ol>{escape(row.name)}: {escape(row.value)}</ol>" for row in rows if row.name
    )
    return DASHBOARD_TEMPLATE.format(items=items)
