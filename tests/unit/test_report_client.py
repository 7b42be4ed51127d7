# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.

"""Unit tests for ReportClient — agent HTTP transport."""

import httpx
import pytest

from mtrrun.agent.client import ReportClient, ReportStatusError


class TestReportClient:
    @pytest.mark.asyncio
    async def test_do_request_success(self, recording_transport):
        """do_request() should send method, url and headers as given."""
        client = ReportClient(transport=recording_transport)
        await client.do_request(
            "POST", "http://fake:8080/update/gauge/Alloc/1.00",
            headers={"Content-Type": "text/plain"},
        )
        await client.close()

        req = recording_transport.requests[0]
        assert req.method == "POST"
        assert req.url.path == "/update/gauge/Alloc/1.00"
        assert req.headers["Content-Type"] == "text/plain"
        assert req.content == b""

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        """A 4xx/5xx response should raise ReportStatusError with the body."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(501, text="unknown metric type")
        )
        client = ReportClient(transport=transport)
        with pytest.raises(ReportStatusError) as exc_info:
            await client.do_request("POST", "http://fake/update/x/y/1")
        await client.close()

        assert exc_info.value.status_code == 501
        assert "unknown metric type" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = ReportClient(transport=httpx.MockTransport(refuse))
        with pytest.raises(httpx.ConnectError):
            await client.do_request("POST", "http://fake/update/gauge/a/1")
        await client.close()

    @pytest.mark.asyncio
    async def test_close(self):
        client = ReportClient(timeout=1.0, max_idle_conns=2)
        assert client.closed is False
        await client.close()
        assert client.closed is True
