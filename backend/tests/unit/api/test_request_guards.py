"""
Unit Tests for the request guards around the API
Tests for: rate limiting, body size limit, request logging
"""
import logging

import pytest
from httpx import AsyncClient
from limits import parse

from app.core import rate_limiter
from app.core.config import settings
from app.core.logging_config import logger
from app.core.rate_limiter import limiter


@pytest.fixture
def rate_limited(monkeypatch):
    """Turn the limiter on with a small allowance of two requests per minute"""
    monkeypatch.setattr(limiter, "enabled", True)
    monkeypatch.setattr(rate_limiter, "API_LIMIT", parse("2/minute"))
    limiter.reset()
    yield
    limiter.reset()


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_api_requests_over_allowance_get_429(self, client: AsyncClient, rate_limited):
        statuses = []
        for _ in range(3):
            response = await client.get("/api/complaints/categories")
            statuses.append(response.status_code)

        assert statuses == [200, 200, 429]
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "RATE_LIMIT_EXCEEDED"
        assert body["details"]["limit"] == "2 per 1 minute"
        assert int(response.headers["Retry-After"]) >= 1

    @pytest.mark.asyncio
    async def test_allowance_is_per_user(
        self, client: AsyncClient, rate_limited, auth_headers: dict, other_auth_headers: dict
    ):
        for _ in range(2):
            await client.get("/api/complaints/categories", headers=auth_headers)

        blocked = await client.get("/api/complaints/categories", headers=auth_headers)
        allowed = await client.get("/api/complaints/categories", headers=other_auth_headers)

        assert blocked.status_code == 429
        assert allowed.status_code == 200

    @pytest.mark.asyncio
    async def test_root_and_health_are_not_counted(self, client: AsyncClient, rate_limited):
        for _ in range(5):
            assert (await client.get("/")).status_code == 200
            assert (await client.get("/health")).status_code == 200

        response = await client.get("/api/complaints/categories")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_disabled_limiter_never_blocks(self, client: AsyncClient):
        for _ in range(5):
            response = await client.get("/api/complaints/categories")
            assert response.status_code == 200


class TestRequestSizeLimit:

    @pytest.mark.asyncio
    async def test_oversized_body_rejected(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/complaints",
            content=b"x" * (settings.MAX_REQUEST_SIZE + 1),
            headers={**auth_headers, "Content-Type": "application/json"}
        )

        assert response.status_code == 413
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "PAYLOAD_TOO_LARGE"


class TestRequestLogging:

    @pytest.fixture
    def logged_requests(self, monkeypatch):
        calls = []

        def record(method, path, status_code, duration_ms, **kwargs):
            calls.append((method, path, status_code))

        monkeypatch.setattr(logger, "log_request", record)
        return calls

    @pytest.mark.asyncio
    async def test_api_request_is_logged(self, client: AsyncClient, logged_requests):
        await client.get("/api/complaints/categories")
        await client.get("/api/nowhere")

        assert logged_requests == [
            ("GET", "/api/complaints/categories", 200),
            ("GET", "/api/nowhere", 404),
        ]

    @pytest.mark.asyncio
    async def test_health_is_not_logged(self, client: AsyncClient, logged_requests):
        await client.get("/health")

        assert logged_requests == []

    def test_log_level_follows_status(self, monkeypatch):
        levels = []
        monkeypatch.setattr(logger, "log", lambda level, msg, *args, **kwargs: levels.append(level))

        logger.log_request("GET", "/api/complaints", 200, 1.0)
        logger.log_request("GET", "/api/complaints", 404, 1.0)
        logger.log_request("GET", "/api/complaints", 500, 1.0)

        assert levels == [logging.INFO, logging.WARNING, logging.ERROR]
