"""
Integration Tests for Pagination.

Tests offset pagination on the settings and users list endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.models.setting import Setting


async def _add_settings(db_session: AsyncSession, count: int) -> None:
    for i in range(count):
        db_session.add(
            Setting(
                key=f"flag_{i:02d}",
                flag_type="bool",
                value=False,
                description="Generated" if i % 2 else "Telegram switch",
            )
        )
    await db_session.flush()


class TestPaginatedListEndpoint:
    """Tests for the paginated settings list."""

    @pytest.mark.asyncio
    async def test_returns_paginated_response_structure(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        auth_headers,
    ):
        """Should return response with pagination info."""
        await _add_settings(db_session, 1)

        response = await client.get("/api/v1/settings", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()

        assert data["success"] is True
        assert set(data) >= {"data", "pagination", "metadata"}
        assert set(data["pagination"]) == {"total", "limit", "offset", "has_more"}
        assert data["data"][0]["type"] == "bool"
        assert "_id" in data["data"][0]

    @pytest.mark.asyncio
    async def test_default_limit_comes_from_config(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        auth_headers,
    ):
        await _add_settings(db_session, 25)

        response = await client.get("/api/v1/settings", headers=auth_headers)

        data = response.json()
        assert data["pagination"]["limit"] == 20
        assert data["pagination"]["total"] == 25
        assert len(data["data"]) == 20

    @pytest.mark.asyncio
    async def test_respects_limit_and_offset(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        auth_headers,
    ):
        """Pages are ordered by key."""
        await _add_settings(db_session, 10)

        first = (await client.get("/api/v1/settings?limit=3", headers=auth_headers)).json()
        last = (
            await client.get("/api/v1/settings?limit=3&offset=9", headers=auth_headers)
        ).json()

        assert [s["key"] for s in first["data"]] == ["flag_00", "flag_01", "flag_02"]
        assert first["pagination"]["has_more"] is True
        assert [s["key"] for s in last["data"]] == ["flag_09"]
        assert last["pagination"]["has_more"] is False

    @pytest.mark.asyncio
    async def test_limit_is_clamped_to_max(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/v1/settings?limit=500", headers=auth_headers)

        assert response.json()["pagination"]["limit"] == 100

    @pytest.mark.asyncio
    async def test_zero_limit_is_invalid(self, client: AsyncClient, api, auth_headers):
        response = await client.get("/api/v1/settings?limit=0", headers=auth_headers)

        api.assert_validation_error(response, field="limit")

    @pytest.mark.asyncio
    async def test_search_matches_key_and_description(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        auth_headers,
    ):
        await _add_settings(db_session, 6)

        by_description = (
            await client.get("/api/v1/settings?search=telegram", headers=auth_headers)
        ).json()
        by_key = (await client.get("/api/v1/settings?search=flag_05", headers=auth_headers)).json()

        assert by_description["pagination"]["total"] == 3
        assert [s["key"] for s in by_key["data"]] == ["flag_05"]

    @pytest.mark.asyncio
    async def test_empty_list(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/v1/settings", headers=auth_headers)

        data = response.json()
        assert data["data"] == []
        assert data["pagination"]["total"] == 0
        assert data["pagination"]["has_more"] is False
