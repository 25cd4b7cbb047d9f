"""Tests for FastAPI health and version endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from src.db.session import get_async_session


class TestHealthEndpoint:
    """GET /health and /api/health report database connectivity."""

    @pytest.mark.anyio
    async def test_health_returns_200(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200

    @pytest.mark.anyio
    async def test_api_health_response_body(self, client: AsyncClient) -> None:
        response = await client.get("/api/health")
        data = response.json()
        assert data["status"] == "ok"
        assert data["database"] == "connected"
        assert "environment" in data
        assert "timestamp" in data

    @pytest.mark.anyio
    async def test_health_degraded_when_database_fails(self, client: AsyncClient) -> None:
        from src.api.main import app

        class _BrokenSession:
            async def execute(self, *_args, **_kwargs):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))

            async def rollback(self) -> None:
                return None

        async def _broken():
            yield _BrokenSession()

        app.dependency_overrides[get_async_session] = _broken
        response = await client.get("/api/health")
        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "error"
        assert data["database"] == "disconnected"
        assert "DATABASE_URL" in data["error"]

    @pytest.mark.anyio
    async def test_security_headers_present(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestVersionEndpoint:
    """GET /api/version returns application version info."""

    @pytest.mark.anyio
    async def test_version_response_body(self, client: AsyncClient) -> None:
        response = await client.get("/api/version")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "KB Enterprise"
        assert "version" in data
        assert "environment" in data
