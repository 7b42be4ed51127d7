# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Metric Service — Upsert orchestration over the repository.

Gauges overwrite, counters accumulate. A NotFoundError from the repository
on the write path means "create"; every other error propagates.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List

from mtrrun.server.errors import NotFoundError, ValidationError
from mtrrun.server.models import (
    INT64_MAX,
    INT64_MIN,
    Counter,
    Gauge,
    MetricView,
    format_float,
    format_int,
)
from mtrrun.server.repository import MetricMemCache

logger = logging.getLogger("mtrrun.service")


class MetricService:
    """Business logic for the collector endpoints."""

    def __init__(self, repo: MetricMemCache) -> None:
        self._repo = repo
        # select-then-write must not interleave for the same type
        self._gauge_lock = asyncio.Lock()
        self._counter_lock = asyncio.Lock()

    # ── Reads ───────────────────────────────────────────────────

    async def get_gauge(self, name: str) -> Gauge:
        """Raises NotFoundError if the gauge was never written."""
        return await self._repo.select_gauge_by_name(name)

    async def get_counter(self, name: str) -> Counter:
        """Raises NotFoundError if the counter was never written."""
        return await self._repo.select_counter_by_name(name)

    async def get_all(self) -> List[MetricView]:
        """All gauges then all counters, each rendered as text."""
        gauges = await self._repo.select_gauges()
        counters = await self._repo.select_counters()
        result = [MetricView(g.name, format_float(g.value)) for g in gauges]
        result.extend(MetricView(c.name, format_int(c.value)) for c in counters)
        return result

    # ── Writes ──────────────────────────────────────────────────

    async def put_gauge(self, name: str, value: float) -> None:
        """Create the gauge or overwrite its value."""
        async with self._gauge_lock:
            try:
                current = await self._repo.select_gauge_by_name(name)
            except NotFoundError:
                await self._repo.insert_gauge(Gauge(name=name, value=value))
                logger.debug("Gauge created: %s=%s", name, value)
                return
            current.value = value
            await self._repo.update_gauge(current)
            logger.debug("Gauge updated: %s=%s", name, value)

    async def put_counter(self, name: str, delta: int) -> None:
        """
        Create the counter at `delta` or add `delta` to the stored value.

        Raises ValidationError if the sum leaves the int64 range; the stored
        value is left unchanged.
        """
        async with self._counter_lock:
            try:
                current = await self._repo.select_counter_by_name(name)
            except NotFoundError:
                await self._repo.insert_counter(Counter(name=name, value=delta))
                logger.debug("Counter created: %s=%d", name, delta)
                return
            total = current.value + delta
            if not INT64_MIN <= total <= INT64_MAX:
                raise ValidationError(
                    f"counter {name} would overflow int64: {current.value} + {delta}"
                )
            current.value = total
            await self._repo.update_counter(current)
            logger.debug("Counter updated: %s=%d (+%d)", name, current.value, delta)
