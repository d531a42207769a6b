"""
Integration Test Fixtures.

The real app over ASGITransport, wired to the per-test database session
from the root conftest, plus bearer headers for each role and envelope
assertions.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient, Response
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.core.database import get_db_session


@asynccontextmanager
async def _serve(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    API client sharing the test's session.

    Rows written through the API are visible to the test body and vanish
    with the rest of the test data.
    """
    from orderflow.backend.main import create_app

    async def shared_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app = create_app()
    app.dependency_overrides[get_db_session] = shared_session
    async with _serve(app) as http:
        yield http
    app.dependency_overrides.clear()


@pytest.fixture
async def client_no_db() -> AsyncGenerator[AsyncClient, None]:
    """API client for routes that never open a session, such as /health."""
    from orderflow.backend.main import create_app

    async with _serve(create_app()) as http:
        yield http


# =============================================================================
# Envelope assertions
# =============================================================================


class ApiAssertions:
    """Checks for the {success, data, error, metadata} envelope."""

    @staticmethod
    def _status(response: Response, expected: int) -> dict[str, Any]:
        assert response.status_code == expected, (
            f"Expected status {expected}, got {response.status_code}: {response.text}"
        )
        return response.json()

    @classmethod
    def assert_success(cls, response: Response, expected_status: int = 200) -> dict[str, Any]:
        body = cls._status(response, expected_status)
        assert body.get("success") is True, f"Envelope is not a success: {body}"
        return body

    @classmethod
    def assert_error(
        cls,
        response: Response,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        body = cls._status(response, expected_status)
        assert body.get("success") is False, f"Envelope is not an error: {body}"
        assert body.get("error") is not None, f"Error block missing: {body}"
        if expected_code:
            assert body["error"].get("code") == expected_code, (
                f"Expected error code {expected_code}, got {body['error'].get('code')}"
            )
        return body

    @classmethod
    def assert_validation_error(cls, response: Response, field: str | None = None) -> dict[str, Any]:
        """422 VAL_REQUEST_INVALID, optionally naming a field (matched as a substring of the loc)."""
        body = cls.assert_error(response, 422, "VAL_REQUEST_INVALID")
        if field:
            errors = body["error"].get("details", {}).get("validation_errors", [])
            fields = [error.get("field", "") for error in errors]
            assert any(field in name for name in fields), (
                f"No validation error for '{field}'; got {fields}"
            )
        return body


@pytest.fixture
def api() -> ApiAssertions:
    return ApiAssertions()


# =============================================================================
# Bearer headers
# =============================================================================


def _bearer(user_id: str, role: str) -> dict[str, str]:
    from orderflow.backend.core.security import create_access_token

    token = create_access_token(data={"sub": user_id, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return _bearer("admin-user-id", "admin")


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """A plain client; may read flows and place orders but not administer."""
    return _bearer("client-user-id", "client")


@pytest.fixture
def headers_for():
    """headers_for("courier-1", "courier") for any other caller."""
    return _bearer
