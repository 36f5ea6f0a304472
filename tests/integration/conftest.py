"""
Integration Test Fixtures.

Fixtures for integration tests - real app, real database, real services.
These fixtures build on the root conftest.py database fixtures.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notekeeper.backend.core.database import get_db_session

TEST_PASSWORD = "secret1"


# =============================================================================
# Application Fixtures
# =============================================================================


def _create_mock_settings() -> Any:
    """Secrets for tests; config/.env is not committed."""
    settings = MagicMock()
    settings.db_password = "test"
    settings.redis_password = ""
    settings.jwt_secret = "test-secret-key"
    return settings


@pytest.fixture
def app(
    db_session_factory: async_sessionmaker[AsyncSession],
) -> Any:
    """
    The FastAPI application wired to the test database.

    Each request gets its own session from the test engine and commits
    on success, as get_db_session does in production.
    """

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    with patch("notekeeper.backend.core.config.get_settings") as mock_config_settings, \
         patch("notekeeper.backend.core.security.get_settings") as mock_security_settings:
        mock_settings = _create_mock_settings()
        mock_config_settings.return_value = mock_settings
        mock_security_settings.return_value = mock_settings

        from notekeeper.backend.main import create_app

        application = create_app()
        application.dependency_overrides[get_db_session] = override_get_db_session
        yield application
        application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client for the test application.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client


@pytest.fixture
async def client_no_db() -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client without the database override.

    Use this for endpoints that must cope with an unreachable database
    (e.g. the readiness check).
    """
    with patch("notekeeper.backend.core.config.get_settings") as mock_config_settings, \
         patch("notekeeper.backend.core.security.get_settings") as mock_security_settings:
        mock_settings = _create_mock_settings()
        mock_config_settings.return_value = mock_settings
        mock_security_settings.return_value = mock_settings

        from notekeeper.backend.main import create_app

        async with AsyncClient(
            transport=ASGITransport(app=create_app()),
            base_url="http://test",
        ) as test_client:
            yield test_client


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """Assert API response is a request validation error (422)."""
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()


# =============================================================================
# Authentication Fixtures
# =============================================================================


@pytest.fixture
def register(client: AsyncClient) -> Callable[[str], Awaitable[dict[str, str]]]:
    """
    Register an account and return its auth headers.

    Usage:
        headers = await register("bob@example.com")
    """

    async def _register(email: str, password: str = TEST_PASSWORD) -> dict[str, str]:
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        token = response.json()["data"]["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _register


@pytest.fixture
async def auth_headers(register) -> dict[str, str]:
    """
    Headers of a freshly registered user.

    Usage:
        async def test_list(client: AsyncClient, auth_headers: dict):
            response = await client.get("/api/v1/notes", headers=auth_headers)
            assert response.status_code == 200
    """
    return await register("ada@example.com")


@pytest.fixture
async def other_headers(register) -> dict[str, str]:
    """Headers of a second user, for ownership checks."""
    return await register("bob@example.com")


@pytest.fixture
def create_note(client: AsyncClient, auth_headers: dict[str, str]):
    """Create a note for the default user and return its JSON."""

    async def _create(**fields: Any) -> dict[str, Any]:
        response = await client.post("/api/v1/notes", json=fields, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
