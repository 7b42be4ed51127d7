# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Tracker — In-process registry of metrics keyed by name.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List

from mtrrun.agent.metrics import MetricKind

logger = logging.getLogger("mtrrun.tracker")

UNKNOWN_TYPE = "unknown"


@dataclass(frozen=True)
class Status:
    """Point-in-time rendering of one tracked metric."""
    name: str
    metric_type: str
    value: str


def metric_type_of(metric: Any) -> str:
    """Resolve the wire type tag from the metric's `kind` discriminant."""
    kind = getattr(metric, "kind", None)
    if isinstance(kind, MetricKind):
        return kind.value
    return UNKNOWN_TYPE


class Tracker:
    """
    Name → metric mapping.

    Re-tracking a name replaces the previous instance. status() takes the
    registry lock only while copying the mapping; values are rendered
    afterwards under each metric's own lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._metrics: Dict[str, Any] = {}

    def track(self, metric: Any) -> None:
        """Add a metric, replacing any metric with the same name."""
        name = metric.describe().name
        with self._lock:
            self._metrics[name] = metric
        logger.debug("Tracking metric: %s", name)

    def untrack(self, metric: Any) -> None:
        """Remove a metric by name. Absent names are ignored."""
        with self._lock:
            self._metrics.pop(metric.describe().name, None)

    def status(self) -> List[Status]:
        """Snapshot every tracked metric as a Status."""
        with self._lock:
            items = list(self._metrics.items())
        return [
            Status(name=name, metric_type=metric_type_of(metric), value=metric.render_value())
            for name, metric in items
        ]

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._metrics

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)
