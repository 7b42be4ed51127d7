# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Metrics — Counter and Gauge value holders.

Each instance carries an explicit `kind` discriminant so the tracker can
classify it without inspecting its class. Reads and writes are guarded by
a per-instance lock: the poll task writes while the report task reads.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum


class MetricKind(str, Enum):
    """Wire type tag of a metric."""

    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class Description:
    """Name and help text of a metric."""
    name: str
    help: str = ""


class Counter:
    """Monotonic integer counter."""

    kind = MetricKind.COUNTER

    def __init__(self, name: str, help: str = "") -> None:
        self._lock = threading.Lock()
        self._value: int = 0
        self._desc = Description(name=name, help=help)

    @property
    def name(self) -> str:
        return self._desc.name

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def describe(self) -> Description:
        return self._desc

    def increment(self) -> None:
        """Increment the counter by 1."""
        with self._lock:
            self._value += 1

    def render_value(self) -> str:
        with self._lock:
            return "%d" % self._value

    def __repr__(self) -> str:
        return f"Counter(name={self.name!r}, value={self.value})"


class Gauge:
    """Float value that can go up and down."""

    kind = MetricKind.GAUGE

    def __init__(self, name: str, help: str = "") -> None:
        self._lock = threading.Lock()
        self._value: float = 0.0
        self._desc = Description(name=name, help=help)

    @property
    def name(self) -> str:
        return self._desc.name

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def describe(self) -> Description:
        return self._desc

    def set(self, value: float) -> None:
        """Set the gauge to an arbitrary value."""
        with self._lock:
            self._value = float(value)

    def increment(self) -> None:
        """Increment the gauge by 1. Use add() for arbitrary deltas."""
        with self._lock:
            self._value += 1

    def decrement(self) -> None:
        """Decrement the gauge by 1. Use subtract() for arbitrary deltas."""
        with self._lock:
            self._value -= 1

    def add(self, value: float) -> None:
        with self._lock:
            self._value += value

    def subtract(self, value: float) -> None:
        with self._lock:
            self._value -= value

    def render_value(self) -> str:
        """Render with fixed 2-decimal precision; storage keeps full precision."""
        with self._lock:
            return "%.2f" % self._value

    def __repr__(self) -> str:
        return f"Gauge(name={self.name!r}, value={self.value})"
