# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Shared test fixtures for agent and collector tests.
"""

from __future__ import annotations

from typing import List

import httpx
import pytest

from mtrrun.agent.tracker import Tracker
from mtrrun.core.config import AgentSettings
from mtrrun.server.main import create_app
from mtrrun.server.repository import MetricMemCache
from mtrrun.server.service import MetricService


class RecordingTransport(httpx.AsyncBaseTransport):
    """httpx transport that records requests and answers with a fixed status."""

    def __init__(self, status_code: int = 200, text: str = "OK") -> None:
        self.status_code = status_code
        self.text = text
        self.requests: List[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.text, request=request)

    @property
    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def agent_settings() -> AgentSettings:
    """Agent settings isolated from any .env file."""
    return AgentSettings(
        _env_file=None,
        HOST="collector:8080",
        REPORT_INTERVAL=0.05,
        POLL_INTERVAL=0.05,
        MAX_REQUESTS_PER_MOMENT=3,
    )


@pytest.fixture
def tracker() -> Tracker:
    return Tracker()


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def repo() -> MetricMemCache:
    return MetricMemCache()


@pytest.fixture
def service(repo) -> MetricService:
    return MetricService(repo)


@pytest.fixture
def collector_app(repo):
    """Collector FastAPI app over a fresh repository."""
    return create_app(repo)
