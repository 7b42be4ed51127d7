# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Repository Layer — In-memory metric cache.

Gauges and counters live in separate maps, each behind its own lock, so
operations on one type never wait on the other. Stored records are copied
in and out; callers never hold a reference into the map.

Insert rejects existing names. Idempotent upserts belong to MetricService.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Dict, Generic, List, TypeVar

from mtrrun.server.errors import AlreadyExistsError, NotFoundError
from mtrrun.server.models import COUNTER, GAUGE, Counter, Gauge

M = TypeVar("M", Gauge, Counter)


class _TypedStore(Generic[M]):
    """One name → record map and the lock that guards it."""

    def __init__(self, metric_type: str) -> None:
        self.metric_type = metric_type
        self._lock = threading.Lock()
        self._items: Dict[str, M] = {}

    def select_by_name(self, name: str) -> M:
        with self._lock:
            metric = self._items.get(name)
        if metric is None:
            raise NotFoundError(self.metric_type, name)
        return replace(metric)

    def select_all(self) -> List[M]:
        with self._lock:
            return [replace(m) for m in self._items.values()]

    def insert(self, metric: M) -> None:
        with self._lock:
            if metric.name in self._items:
                raise AlreadyExistsError(self.metric_type, metric.name)
            self._items[metric.name] = replace(metric)

    def update(self, metric: M) -> None:
        with self._lock:
            if metric.name not in self._items:
                raise NotFoundError(self.metric_type, metric.name)
            self._items[metric.name] = replace(metric)

    def delete(self, name: str) -> None:
        with self._lock:
            if self._items.pop(name, None) is None:
                raise NotFoundError(self.metric_type, name)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class MetricMemCache:
    """Process-lifetime store for gauge and counter metrics."""

    def __init__(self) -> None:
        self._gauges: _TypedStore[Gauge] = _TypedStore(GAUGE)
        self._counters: _TypedStore[Counter] = _TypedStore(COUNTER)

    # ── Gauges ──────────────────────────────────────────────────

    async def select_gauge_by_name(self, name: str) -> Gauge:
        return self._gauges.select_by_name(name)

    async def select_gauges(self) -> List[Gauge]:
        return self._gauges.select_all()

    async def insert_gauge(self, metric: Gauge) -> None:
        """Insert a gauge. Raises AlreadyExistsError if the name is taken."""
        self._gauges.insert(metric)

    async def update_gauge(self, metric: Gauge) -> None:
        """Replace a stored gauge. Raises NotFoundError if absent."""
        self._gauges.update(metric)

    async def delete_gauge(self, name: str) -> None:
        self._gauges.delete(name)

    # ── Counters ────────────────────────────────────────────────

    async def select_counter_by_name(self, name: str) -> Counter:
        return self._counters.select_by_name(name)

    async def select_counters(self) -> List[Counter]:
        return self._counters.select_all()

    async def insert_counter(self, metric: Counter) -> None:
        """Insert a counter. Raises AlreadyExistsError if the name is taken."""
        self._counters.insert(metric)

    async def update_counter(self, metric: Counter) -> None:
        """Replace a stored counter. Raises NotFoundError if absent."""
        self._counters.update(metric)

    async def delete_counter(self, name: str) -> None:
        self._counters.delete(name)

    def stats(self) -> Dict[str, int]:
        return {GAUGE: len(self._gauges), COUNTER: len(self._counters)}
