# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
mtrrun Agent Entry Point.

Entry point: python -m mtrrun.agent.main   (or the `mtrrun-agent` script)
"""

from __future__ import annotations

import asyncio
import logging
import signal

from mtrrun.agent.agent import Agent
from mtrrun.agent.collector import RuntimeCollector
from mtrrun.core.config import get_agent_settings
from mtrrun.core.logging import setup_logging

logger = logging.getLogger("mtrrun.agent.main")


async def serve() -> None:
    """Build the agent from settings and run it until SIGINT/SIGTERM."""
    settings = get_agent_settings()
    agent = Agent(settings, collector=RuntimeCollector())

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            pass

    run_task = asyncio.create_task(agent.run())
    logger.info("Agent started, reporting to %s", settings.HOST)

    try:
        await stop.wait()
        logger.info("Agent stopping")
    finally:
        await agent.shutdown()
        await run_task
    logger.info("Agent exited properly")


def main() -> None:
    setup_logging(get_agent_settings().LOG_LEVEL)
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
