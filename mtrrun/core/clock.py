# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
TickClock — Periodic async ticker.

Drives the agent's poll and report cycles. Each tick awaits its callbacks
before the next wait starts, so ticks of one clock never overlap.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional

logger = logging.getLogger("mtrrun.clock")


class TickClock:
    """
    Clock that emits a tick every `interval` seconds.

    The first tick fires one interval after start(). stop() wakes the
    pending wait immediately; a callback already running is allowed to
    finish rather than being cancelled.
    """

    def __init__(self, interval: float, name: str = "clock") -> None:
        """
        Args:
            interval: Tick interval in seconds.
            name: Label used in log lines.
        """
        self._interval = interval
        self._name = name
        self._tick: int = 0
        self._running: bool = False
        self._task: Optional[asyncio.Task] = None
        self._wakeup: Optional[asyncio.Event] = None
        self._callbacks: list[Callable[[int], Coroutine[Any, Any, None]]] = []

    @property
    def tick(self) -> int:
        """Number of ticks emitted so far."""
        return self._tick

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._running

    def in_tick(self) -> bool:
        """True when called from this clock's own loop, i.e. inside a callback."""
        return self._task is not None and asyncio.current_task() is self._task

    def on_tick(self, callback: Callable[[int], Coroutine[Any, Any, None]]) -> None:
        """Register an async callback to be invoked on each tick."""
        self._callbacks.append(callback)

    async def start(self) -> None:
        """Start the clock loop."""
        if self._running:
            return
        self._running = True
        self._wakeup = asyncio.Event()
        self._task = asyncio.create_task(self._loop())
        logger.info("%s started (interval=%.2fs)", self._name, self._interval)

    async def _loop(self) -> None:
        """Internal tick loop: wait for the next tick or stop(), whichever comes first."""
        while self._running:
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
            if not self._running:
                break
            self._tick += 1
            for cb in self._callbacks:
                try:
                    await cb(self._tick)
                except Exception as exc:
                    logger.error("%s callback error at tick %d: %s", self._name, self._tick, exc)

    async def stop(self) -> None:
        """Stop the clock loop and wait for an in-flight tick to complete."""
        self._running = False
        if self._wakeup:
            self._wakeup.set()
        if self._task:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("%s stopped at tick %d", self._name, self._tick)
