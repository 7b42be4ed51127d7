# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Runtime Collector — Fills tracked metrics from the Python runtime.

The catalog below is the single list of metrics the agent reports. Each row
names the metric, its kind, and how to read its value from one
RuntimeSample. Custom metrics (PollCount, RandomValue) are maintained by
the collector itself.
"""

from __future__ import annotations

import gc
import logging
import os
import random
import sys
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from mtrrun.agent.metrics import Counter, Gauge, MetricKind
from mtrrun.agent.tracker import Tracker

try:
    import resource
except ImportError:  # Windows
    resource = None

logger = logging.getLogger("mtrrun.collector")

POLL_COUNT = "PollCount"
RANDOM_VALUE = "RandomValue"


@dataclass
class RuntimeSample:
    """One read of interpreter and process statistics."""
    gc_counts: tuple = (0, 0, 0)
    gc_stats: List[Dict[str, int]] = field(default_factory=list)
    allocated_blocks: int = 0
    thread_count: int = 0
    max_rss: float = 0.0
    user_time: float = 0.0
    system_time: float = 0.0
    open_fds: int = 0
    uptime: float = 0.0

    def gc_stat(self, generation: int, key: str) -> float:
        if generation < len(self.gc_stats):
            return float(self.gc_stats[generation].get(key, 0))
        return 0.0


def _count_open_fds() -> int:
    for path in ("/proc/self/fd", "/dev/fd"):
        if os.path.isdir(path):
            return len(os.listdir(path))
    return 0


def read_runtime_sample(started_at: float) -> RuntimeSample:
    """Read the current runtime statistics."""
    sample = RuntimeSample(
        gc_counts=gc.get_count(),
        gc_stats=gc.get_stats(),
        allocated_blocks=sys.getallocatedblocks(),
        thread_count=threading.active_count(),
        open_fds=_count_open_fds(),
        uptime=time.monotonic() - started_at,
    )
    if resource is not None:
        usage = resource.getrusage(resource.RUSAGE_SELF)
        sample.max_rss = float(usage.ru_maxrss)
        sample.user_time = usage.ru_utime
        sample.system_time = usage.ru_stime
    return sample


@dataclass(frozen=True)
class CatalogEntry:
    """Declarative description of one reported runtime metric."""
    name: str
    kind: MetricKind
    help: str
    read: Optional[Callable[[RuntimeSample], float]] = None

    def __post_init__(self) -> None:
        # Samples are absolute readings; only gauges can take them
        if self.kind is MetricKind.COUNTER and self.read is not None:
            raise ValueError(f"catalog counter {self.name!r} cannot have a sample reader")


def _gc_generation_entries() -> List[CatalogEntry]:
    entries = []
    for gen in range(3):
        entries.extend([
            CatalogEntry(
                f"GCCount{gen}", MetricKind.GAUGE,
                f"Pending allocations counted for GC generation {gen}",
                lambda s, g=gen: float(s.gc_counts[g]),
            ),
            CatalogEntry(
                f"GCCollections{gen}", MetricKind.GAUGE,
                f"Collections of GC generation {gen}",
                lambda s, g=gen: s.gc_stat(g, "collections"),
            ),
            CatalogEntry(
                f"GCCollected{gen}", MetricKind.GAUGE,
                f"Objects collected in GC generation {gen}",
                lambda s, g=gen: s.gc_stat(g, "collected"),
            ),
            CatalogEntry(
                f"GCUncollectable{gen}", MetricKind.GAUGE,
                f"Uncollectable objects found in GC generation {gen}",
                lambda s, g=gen: s.gc_stat(g, "uncollectable"),
            ),
        ])
    return entries


RUNTIME_CATALOG: List[CatalogEntry] = [
    CatalogEntry("AllocatedBlocks", MetricKind.GAUGE,
                 "Memory blocks currently allocated by the interpreter",
                 lambda s: float(s.allocated_blocks)),
    CatalogEntry("ThreadCount", MetricKind.GAUGE, "Live threads",
                 lambda s: float(s.thread_count)),
    CatalogEntry("MaxRSS", MetricKind.GAUGE, "Peak resident set size",
                 lambda s: s.max_rss),
    CatalogEntry("UserCPUTime", MetricKind.GAUGE, "User CPU seconds",
                 lambda s: s.user_time),
    CatalogEntry("SystemCPUTime", MetricKind.GAUGE, "System CPU seconds",
                 lambda s: s.system_time),
    CatalogEntry("OpenFDs", MetricKind.GAUGE, "Open file descriptors",
                 lambda s: float(s.open_fds)),
    CatalogEntry("Uptime", MetricKind.GAUGE, "Seconds since the collector started",
                 lambda s: s.uptime),
    *_gc_generation_entries(),
]

CUSTOM_CATALOG: List[CatalogEntry] = [
    CatalogEntry(POLL_COUNT, MetricKind.COUNTER, "Number of completed polls"),
    CatalogEntry(RANDOM_VALUE, MetricKind.GAUGE, "Random value refreshed every poll"),
]


def build_metric(entry: CatalogEntry):
    if entry.kind is MetricKind.COUNTER:
        return Counter(entry.name, entry.help)
    return Gauge(entry.name, entry.help)


class RuntimeCollector:
    """
    Owns the catalog metrics and refreshes them on every poll.

    Usage:
        collector = RuntimeCollector()
        collector.register(tracker)
        await collector.collect()
    """

    def __init__(
        self,
        catalog: Optional[List[CatalogEntry]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._started_at = time.monotonic()
        self._rng = rng or random.Random()
        self._entries = list(RUNTIME_CATALOG if catalog is None else catalog) + CUSTOM_CATALOG
        self._metrics = {entry.name: build_metric(entry) for entry in self._entries}

    @property
    def metrics(self) -> Dict[str, object]:
        return dict(self._metrics)

    @property
    def poll_count(self) -> Counter:
        return self._metrics[POLL_COUNT]

    @property
    def random_value(self) -> Gauge:
        return self._metrics[RANDOM_VALUE]

    def register(self, tracker: Tracker) -> None:
        """Track every catalog metric."""
        for metric in self._metrics.values():
            tracker.track(metric)
        logger.info("Registered %d metrics", len(self._metrics))

    def refresh(self, sample: RuntimeSample) -> None:
        """Write one sample into the gauges and bump the poll counter."""
        for entry in self._entries:
            if entry.read is not None:
                self._metrics[entry.name].set(entry.read(sample))
        self.random_value.set(self._rng.random())
        self.poll_count.increment()

    async def collect(self, tick: int = 0) -> None:
        """Poll-clock callback."""
        self.refresh(read_runtime_sample(self._started_at))
        logger.debug("Poll %d complete", self.poll_count.value)
