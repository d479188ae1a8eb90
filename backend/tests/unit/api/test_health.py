"""
Unit Tests for health, root and the fallback error envelopes
"""
import pytest
from httpx import AsyncClient

from app.api.endpoints import health
from app.core.database import get_db
from app.main import app


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_ok(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "OK"
        assert body["database"] == "Connected"
        assert body["uptime"] >= 0
        assert body["timestamp"].endswith("Z")

    @pytest.mark.asyncio
    async def test_health_database_down(self, client: AsyncClient):
        class BrokenSession:
            async def execute(self, *args, **kwargs):
                raise ConnectionRefusedError("database is down")

        async def broken_db():
            yield BrokenSession()

        app.dependency_overrides[get_db] = broken_db

        response = await client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "DATABASE_UNAVAILABLE"
        assert body["database"] == "Disconnected"

    def test_uptime_is_non_negative(self):
        assert health.uptime_seconds() >= 0


class TestRoot:

    @pytest.mark.asyncio
    async def test_root_lists_endpoints(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["endpoints"]["complaints"] == "/api/complaints"


class TestFallbackErrors:

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get("/api/nowhere")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "ROUTE_NOT_FOUND"
        assert body["message"] == "Route GET /api/nowhere not found"

    @pytest.mark.asyncio
    async def test_method_not_allowed(self, client: AsyncClient):
        response = await client.delete("/api/complaints/categories")

        assert response.status_code == 405
        assert response.json()["error_code"] == "METHOD_NOT_ALLOWED"

    @pytest.mark.asyncio
    async def test_security_headers_and_request_id(self, client: AsyncClient):
        response = await client.get("/", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Request-ID"] == "req-123"
        assert "X-Response-Time" in response.headers
