# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.
"""Unit tests for Tracker."""

from mtrrun.agent.metrics import Counter, Gauge
from mtrrun.agent.tracker import Status, Tracker, metric_type_of


class _Opaque:
    """A metric-like object without a kind discriminant."""

    def __init__(self, name):
        self._name = name

    def describe(self):
        return type("D", (), {"name": self._name})()

    def render_value(self):
        return "x"


class TestTracker:
    def test_track_and_status(self, tracker):
        c = Counter("best_counter_total", "best counter ever")
        g = Gauge("best_gauge_total", "best gauge total")
        tracker.track(c)
        tracker.track(g)
        c.increment()
        c.increment()
        g.decrement()

        statuses = set(tracker.status())
        assert statuses == {
            Status("best_counter_total", "counter", "2"),
            Status("best_gauge_total", "gauge", "-1.00"),
        }

    def test_untrack(self, tracker):
        g = Gauge("temp")
        tracker.track(g)
        tracker.untrack(g)
        assert tracker.status() == []
        assert "temp" not in tracker

    def test_untrack_absent_is_noop(self, tracker):
        tracker.untrack(Gauge("never_tracked"))
        assert len(tracker) == 0

    def test_retrack_replaces_by_name(self, tracker):
        first = Gauge("dup")
        second = Counter("dup")
        tracker.track(first)
        tracker.track(second)
        statuses = tracker.status()
        assert len(statuses) == 1
        assert statuses[0].metric_type == "counter"

    def test_status_names_unique(self, tracker):
        for i in range(50):
            tracker.track(Gauge(f"g{i % 10}"))
        names = [s.name for s in tracker.status()]
        assert len(names) == len(set(names)) == 10

    def test_unknown_type(self, tracker):
        tracker.track(_Opaque("mystery"))
        assert tracker.status() == [Status("mystery", "unknown", "x")]

    def test_metric_type_of(self):
        assert metric_type_of(Gauge("g")) == "gauge"
        assert metric_type_of(Counter("c")) == "counter"
        assert metric_type_of(object()) == "unknown"
