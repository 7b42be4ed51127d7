# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Collector data models — stored metric records and rendered views.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal

GAUGE = "gauge"
COUNTER = "counter"

# Counters are signed 64-bit on the wire and in storage
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass
class Gauge:
    name: str
    value: float


@dataclass
class Counter:
    name: str
    value: int


@dataclass(frozen=True)
class MetricView:
    """One dashboard row: name and value rendered as text."""
    name: str
    value: str


def format_float(value: float) -> str:
    """
    Shortest decimal text that round-trips, without exponent.

    3.5 -> "3.5", 5.0 -> "5", 1e20 -> "100000000000000000000".
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return format(Decimal(repr(value)).normalize(), "f")


def format_int(value: int) -> str:
    return "%d" % value
