"""
Unit Tests for Health Check Endpoints.

Tests the health check functionality including:
- Liveness check (/health)
- Readiness check (/health/ready)
- Detailed health check (/health/detailed)
- Database connectivity check
"""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from notekeeper.backend.api.health import (
    check_database,
    check_event_broker,
    detailed_health_check,
    health_check,
    readiness_check,
)


def _failing_factory():
    session = MagicMock()
    session.execute = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("refused")))

    @asynccontextmanager
    async def open_session():
        yield session

    return lambda: open_session()


@pytest.fixture
def healthy_db(db_session_factory):
    with patch(
        "notekeeper.backend.core.database.get_session_factory",
        return_value=db_session_factory,
    ):
        yield


@pytest.fixture
def broken_db():
    with patch(
        "notekeeper.backend.core.database.get_session_factory",
        return_value=_failing_factory(),
    ):
        yield


class TestHealthCheck:
    """Tests for the liveness endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_healthy(self):
        assert await health_check() == {"status": "healthy"}


class TestCheckDatabase:
    """Tests for the database connectivity check."""

    @pytest.mark.asyncio
    async def test_healthy_database(self, healthy_db):
        result = await check_database()

        assert result["status"] == "healthy"
        assert result["latency_ms"] >= 0

    @pytest.mark.asyncio
    async def test_unreachable_database(self, broken_db):
        result = await check_database()

        assert result["status"] == "unhealthy"
        assert "refused" in result["error"]


class TestReadinessCheck:
    """Tests for the readiness endpoint."""

    @pytest.mark.asyncio
    async def test_ready_when_database_healthy(self, healthy_db):
        result = await readiness_check()

        assert result["status"] == "healthy"
        assert result["checks"]["database"]["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_raises_503_when_database_down(self, broken_db):
        with pytest.raises(HTTPException) as exc_info:
            await readiness_check()

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail["status"] == "unhealthy"


class TestDetailedHealthCheck:
    """Tests for the detailed endpoint."""

    @pytest.mark.asyncio
    async def test_includes_application_and_features(self, healthy_db):
        result = await detailed_health_check()

        assert result["status"] == "healthy"
        assert result["application"]["name"] == "Notekeeper"
        assert set(result["features"]) == {
            "public_sharing_enabled",
            "pdf_export_enabled",
            "tasks_enabled",
            "events_publish_enabled",
        }

    @pytest.mark.asyncio
    async def test_reports_unhealthy_database(self, broken_db):
        result = await detailed_health_check()

        assert result["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_event_broker_reported_disabled_by_default(self, healthy_db):
        result = await detailed_health_check()

        assert result["checks"]["events"] == {"status": "disabled"}


def _events_enabled_config():
    return SimpleNamespace(
        features=SimpleNamespace(events_publish_enabled=True),
        application=SimpleNamespace(timeouts=SimpleNamespace(external_api=1)),
    )


class TestCheckEventBroker:
    """Tests for the event broker check."""

    @pytest.mark.asyncio
    async def test_healthy_when_ping_succeeds(self):
        broker = MagicMock()
        broker.ping = AsyncMock(return_value=True)

        with (
            patch("notekeeper.backend.api.health.get_app_config", return_value=_events_enabled_config()),
            patch("notekeeper.backend.events.broker.ensure_connected", AsyncMock(return_value=broker)),
        ):
            result = await check_event_broker()

        assert result["status"] == "healthy"
        broker.ping.assert_awaited_once_with(timeout=1)

    @pytest.mark.asyncio
    async def test_unhealthy_when_ping_fails(self):
        broker = MagicMock()
        broker.ping = AsyncMock(return_value=False)

        with (
            patch("notekeeper.backend.api.health.get_app_config", return_value=_events_enabled_config()),
            patch("notekeeper.backend.events.broker.ensure_connected", AsyncMock(return_value=broker)),
        ):
            result = await check_event_broker()

        assert result == {"status": "unhealthy", "error": "ping failed"}

    @pytest.mark.asyncio
    async def test_unhealthy_when_redis_unreachable(self):
        with (
            patch("notekeeper.backend.api.health.get_app_config", return_value=_events_enabled_config()),
            patch(
                "notekeeper.backend.events.broker.ensure_connected",
                AsyncMock(side_effect=ConnectionError("Connection refused")),
            ),
        ):
            result = await check_event_broker()

        assert result["status"] == "unhealthy"
        assert "refused" in result["error"]
