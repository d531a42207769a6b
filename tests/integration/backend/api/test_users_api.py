"""
Integration Tests for the Users and Groups API.
"""

import pytest
from httpx import AsyncClient


class TestUsers:
    @pytest.mark.asyncio
    async def test_create_user(self, client: AsyncClient, api, admin_headers):
        response = await client.post(
            "/api/v1/users",
            json={"telegramId": "42", "username": "kim", "firstName": "Kim", "role": "courier"},
            headers=admin_headers,
        )

        user = api.assert_success(response, 201)["data"]
        assert user["telegramId"] == "42"
        assert user["role"] == "courier"
        assert user["status"] == "active"

    @pytest.mark.asyncio
    async def test_duplicate_telegram_id_is_409(
        self, client: AsyncClient, api, admin_headers, make_user
    ):
        await make_user(telegram_id="42")

        response = await client.post(
            "/api/v1/users", json={"telegramId": "42"}, headers=admin_headers
        )

        api.assert_error(response, 409, "RES_CONFLICT")

    @pytest.mark.asyncio
    async def test_unknown_role_is_422(self, client: AsyncClient, api, admin_headers):
        response = await client.post(
            "/api/v1/users", json={"role": "wizard"}, headers=admin_headers
        )

        api.assert_validation_error(response, field="role")

    @pytest.mark.asyncio
    async def test_list_filters_by_role(self, client: AsyncClient, api, auth_headers, make_user):
        await make_user(role="courier")
        await make_user(role="courier")
        await make_user(role="client")

        response = await client.get("/api/v1/users?role=courier", headers=auth_headers)

        data = api.assert_success(response)
        assert data["pagination"]["total"] == 2
        assert {u["role"] for u in data["data"]} == {"courier"}

    @pytest.mark.asyncio
    async def test_list_search_and_pages(self, client: AsyncClient, api, auth_headers, make_user):
        for _ in range(3):
            await make_user()
        await make_user(username="dispatcher", first_name="Dana")

        searched = await client.get("/api/v1/users?search=dana", headers=auth_headers)
        paged = await client.get("/api/v1/users?limit=2&offset=0", headers=auth_headers)

        assert [u["username"] for u in api.assert_success(searched)["data"]] == ["dispatcher"]
        paged_data = api.assert_success(paged)
        assert len(paged_data["data"]) == 2
        assert paged_data["pagination"]["has_more"] is True


class TestGroups:
    @pytest.mark.asyncio
    async def test_register_group(self, client: AsyncClient, api, admin_headers, make_shop):
        shop = await make_shop()

        response = await client.post(
            "/api/v1/groups",
            json={"chatId": "-100555", "title": "Shop Orders", "type": "supergroup", "shopId": shop.id},
            headers=admin_headers,
        )

        group = api.assert_success(response, 201)["data"]
        assert group["shopId"] == shop.id
        assert group["type"] == "supergroup"

    @pytest.mark.asyncio
    async def test_duplicate_chat_is_409(self, client: AsyncClient, api, admin_headers, make_group):
        await make_group(chat_id="-100555")

        response = await client.post(
            "/api/v1/groups", json={"chatId": "-100555"}, headers=admin_headers
        )

        api.assert_error(response, 409, "RES_CONFLICT")

    @pytest.mark.asyncio
    async def test_unknown_shop_is_404(self, client: AsyncClient, api, admin_headers):
        response = await client.post(
            "/api/v1/groups", json={"chatId": "-100556", "shopId": "missing"}, headers=admin_headers
        )

        api.assert_error(response, 404, "RES_NOT_FOUND")
