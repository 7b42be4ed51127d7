# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Agent — Periodic push of tracked metrics to the collector server.

Two clocks drive the agent:
  - poll clock   (poll_interval):   the attached collector refreshes values
  - report clock (report_interval): report() sends a snapshot of the tracker

Each report cycle fans out one POST per metric, with at most
`max_requests_per_moment` requests in flight. Failed sends are logged and
dropped; the cycle itself never fails.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from enum import Enum
from typing import Any, List, Optional
from urllib.parse import quote

import httpx

from mtrrun.agent.client import ReportClient, ReportStatusError
from mtrrun.agent.collector import RuntimeCollector
from mtrrun.agent.tracker import Status, Tracker
from mtrrun.core.clock import TickClock
from mtrrun.core.config import AgentSettings

logger = logging.getLogger("mtrrun.agent")

DEFAULT_REPORT_INTERVAL = 2.0
DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_MAX_REQUESTS_PER_MOMENT = 5

CONTENT_TYPE_HEADER = "Content-Type"
DEFAULT_CONTENT_TYPE = "text/plain"


class AgentState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


def _positive_or_default(value, default):
    if value is None or value <= 0:
        return default
    return value


class Agent:
    """
    Facade over the tracker, the report client and the two cycle clocks.

    Usage:
        agent = Agent(AgentSettings(), collector=RuntimeCollector())
        task = asyncio.create_task(agent.run())
        ...
        await agent.shutdown()
    """

    def __init__(
        self,
        settings: Optional[AgentSettings] = None,
        tracker: Optional[Tracker] = None,
        client: Optional[ReportClient] = None,
        collector: Optional[RuntimeCollector] = None,
    ) -> None:
        settings = settings or AgentSettings()
        self._host = settings.HOST
        self._report_interval = _positive_or_default(
            settings.REPORT_INTERVAL, DEFAULT_REPORT_INTERVAL,
        )
        self._poll_interval = _positive_or_default(
            settings.POLL_INTERVAL, DEFAULT_POLL_INTERVAL,
        )
        self._max_requests = _positive_or_default(
            settings.MAX_REQUESTS_PER_MOMENT, DEFAULT_MAX_REQUESTS_PER_MOMENT,
        )

        self._tracker = tracker or Tracker()
        self._client = client or ReportClient(
            timeout=settings.TIMEOUT, max_idle_conns=settings.MAX_IDLE_CONNS,
        )
        self._collector = collector
        if collector is not None:
            collector.register(self._tracker)

        self._state = AgentState.CREATED
        self._state_lock = threading.Lock()
        self._stop_requested = asyncio.Event()
        self._run_finished = asyncio.Event()
        self._clocks: List[TickClock] = []

    # ── Properties ────────────────────────────────────────────

    @property
    def state(self) -> AgentState:
        return self._state

    @property
    def report_interval(self) -> float:
        return self._report_interval

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    @property
    def max_requests_per_moment(self) -> int:
        return self._max_requests

    # ── Registry ──────────────────────────────────────────────

    def track(self, metric: Any) -> None:
        self._tracker.track(metric)

    def untrack(self, metric: Any) -> None:
        self._tracker.untrack(metric)

    def status(self) -> List[Status]:
        return self._tracker.status()

    def use_tracker(self, tracker: Tracker) -> None:
        """Replace the tracker (e.g. a pre-populated one)."""
        self._tracker = tracker

    # ── Lifecycle ─────────────────────────────────────────────

    async def run(self) -> None:
        """Run the poll and report cycles until shutdown() is called."""
        with self._state_lock:
            if self._state is not AgentState.CREATED:
                raise RuntimeError(f"agent cannot run from state '{self._state.value}'")
            self._state = AgentState.RUNNING

        clocks = self._clocks
        report_clock = TickClock(self._report_interval, name="report-clock")
        report_clock.on_tick(self._on_report_tick)
        clocks.append(report_clock)

        if self._collector is not None:
            poll_clock = TickClock(self._poll_interval, name="poll-clock")
            poll_clock.on_tick(self._collector.collect)
            clocks.append(poll_clock)

        logger.info(
            "Agent started — host=%s report=%.2fs poll=%.2fs max_requests=%d",
            self._host, self._report_interval, self._poll_interval, self._max_requests,
        )
        try:
            for clock in clocks:
                await clock.start()
            await self._stop_requested.wait()
        finally:
            for clock in clocks:
                await clock.stop()
            self._run_finished.set()
            logger.info("Agent has been gracefully shut down")

    async def shutdown(self) -> None:
        """
        Stop the cycles and release pooled connections.

        Only the first call has an effect; repeated or concurrent calls
        return immediately.

        Normally waits for run() to stop its clocks first. When awaited from
        inside a tick callback (a collector or report hook), that wait would
        block on the caller itself, so it is skipped: the client is closed
        right away and run() finishes once the callback returns.
        """
        with self._state_lock:
            if self._state is AgentState.STOPPED:
                return
            was_running = self._state is AgentState.RUNNING
            self._state = AgentState.STOPPED

        self._stop_requested.set()
        if any(clock.in_tick() for clock in self._clocks):
            logger.info("Shutdown requested from a tick callback")
        elif was_running:
            await self._run_finished.wait()
        await self._client.close()
        logger.info("Agent client closed")

    # ── Report cycle ──────────────────────────────────────────

    async def _on_report_tick(self, tick: int) -> None:
        await self.report()

    def update_url(self, status: Status) -> str:
        base = self._host if "://" in self._host else f"http://{self._host}"
        return "%s/update/%s/%s/%s" % (
            base.rstrip("/"),
            quote(status.metric_type, safe=""),
            quote(status.name, safe=""),
            quote(status.value, safe=""),
        )

    async def report(self) -> int:
        """
        Send the current snapshot to the collector.

        Returns the number of metrics delivered successfully.
        """
        statuses = self._tracker.status()
        gate = asyncio.Semaphore(self._max_requests)
        results = await asyncio.gather(
            *(self._send(gate, status) for status in statuses)
        )
        delivered = sum(1 for ok in results if ok)
        logger.info("Report cycle complete: %d/%d delivered", delivered, len(statuses))
        return delivered

    async def _send(self, gate: asyncio.Semaphore, status: Status) -> bool:
        async with gate:
            url = self.update_url(status)
            logger.debug("Start of request to url: %s", url)
            try:
                await self._client.do_request(
                    "POST", url, headers={CONTENT_TYPE_HEADER: DEFAULT_CONTENT_TYPE},
                )
            except (httpx.HTTPError, httpx.InvalidURL, ReportStatusError) as exc:
                logger.warning(
                    "Request ended with error: %s", exc,
                    extra={"metric_name": status.name, "metric_type": status.metric_type},
                )
                return False
            except Exception as exc:
                # e.g. RuntimeError from a closed client
                logger.error(
                    "Request could not be sent: %s", exc,
                    extra={"metric_name": status.name, "metric_type": status.metric_type},
                )
                return False
            logger.debug("Request ended without error: %s", url)
            return True
