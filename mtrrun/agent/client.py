# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""
Report HTTP Client — Agent side transport to the collector server.

Thin wrapper over a pooled httpx.AsyncClient: idle keep-alive connections
are reused across report cycles and released on close().
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

logger = logging.getLogger("mtrrun.client")


class ReportStatusError(Exception):
    """The collector answered with a 4xx/5xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(
            f"request ended with status {status_code} and error: {message}"
        )


class ReportClient:
    """
    HTTP client used by the agent to push metric updates.

    Usage:
        client = ReportClient(timeout=5.0, max_idle_conns=100)
        await client.do_request("POST", "http://127.0.0.1:8080/update/gauge/Alloc/1.00")
    """

    def __init__(
        self,
        timeout: float = 5.0,
        max_idle_conns: int = 100,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        limits = httpx.Limits(max_keepalive_connections=max_idle_conns or None)
        self._client = httpx.AsyncClient(
            timeout=timeout or None,
            limits=limits,
            transport=transport,
        )

    async def do_request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: bytes = b"",
    ) -> None:
        """
        Send one request.

        Raises:
            httpx.HTTPError: transport failure or timeout.
            httpx.InvalidURL: the URL cannot be parsed (e.g. a bad port).
            RuntimeError: the client was already closed.
            ReportStatusError: response status >= 400.
        """
        resp = await self._client.request(method, url, headers=headers, content=body)
        if resp.status_code >= 400:
            raise ReportStatusError(resp.status_code, resp.text)

    # ── Lifecycle ─────────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def close(self) -> None:
        """Close pooled connections."""
        await self._client.aclose()
