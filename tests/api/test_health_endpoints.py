"""
API tests for liveness, metrics and request tracing headers.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.api
class TestOperationalEndpoints:
    async def test_liveness(self, client: AsyncClient):
        response = await client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    async def test_metrics_exposes_auth_counters(self, client: AsyncClient):
        await client.get("/api/v1/auth/me")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "onlytrack_auth_failures_total" in response.text
        assert "http_requests_total" in response.text

    async def test_trace_id_is_echoed(self, client: AsyncClient):
        response = await client.get("/", headers={"X-Trace-ID": "trace-123"})

        assert response.status_code == 200
        assert response.headers["X-Trace-ID"] == "trace-123"
        assert response.headers["X-Request-ID"]
        assert "X-Process-Time" in response.headers
