"""
Integration Tests for the Orders API.

Orders move through the shop's flow; every accepted change is handed to
the notification service.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from orderflow.backend.core.config import get_app_config
from orderflow.telegram.services.notifications import NotificationService

BASE = "/api/v1/orders"


@pytest.fixture
def notifier():
    """Record dispatches instead of talking to Telegram."""
    with patch.object(
        NotificationService,
        "handle_order_status_change",
        new=AsyncMock(return_value=[]),
    ) as handle:
        yield handle


@pytest.fixture
async def order(client: AsyncClient, auth_headers, default_flow, make_user, make_shop, notifier):
    """A freshly placed order, as returned by the API."""
    customer = await make_user()
    shop = await make_shop()
    response = await client.post(
        BASE,
        json={
            "customerId": customer.id,
            "shopId": shop.id,
            "items": [
                {"name": "Green Tea", "quantity": 2, "price": 3.5},
                {"name": "Biscuits", "quantity": 1, "price": 2.25},
            ],
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    notifier.reset_mock()
    return response.json()["data"]


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_starts_in_created_with_history(
        self, client: AsyncClient, api, auth_headers, default_flow, make_user, make_shop, notifier
    ):
        customer = await make_user()
        shop = await make_shop()

        response = await client.post(
            BASE,
            json={
                "customerId": customer.id,
                "shopId": shop.id,
                "items": [{"name": "Green Tea", "quantity": 2, "price": 3.5}],
            },
            headers=auth_headers,
        )

        order = api.assert_success(response, 201)["data"]
        assert order["status"] == "created"
        assert order["orderNumber"] == "000001"
        assert order["total"] == 7.0
        assert order["items"][0]["subtotal"] == 7.0
        assert [entry["status"] for entry in order["statusHistory"]] == ["created"]
        assert notifier.await_args.args[2] == "created"

    @pytest.mark.asyncio
    async def test_total_sums_subtotals(self, order):
        assert order["total"] == 9.25

    @pytest.mark.asyncio
    async def test_unknown_shop_is_404(self, client: AsyncClient, api, auth_headers, make_user):
        customer = await make_user()

        response = await client.post(
            BASE,
            json={
                "customerId": customer.id,
                "shopId": "missing",
                "items": [{"name": "Tea", "quantity": 1, "price": 1}],
            },
            headers=auth_headers,
        )

        api.assert_error(response, 404, "RES_NOT_FOUND")

    @pytest.mark.asyncio
    async def test_items_are_required(self, client: AsyncClient, api, auth_headers):
        response = await client.post(
            BASE,
            json={"customerId": "c", "shopId": "s", "items": []},
            headers=auth_headers,
        )

        api.assert_validation_error(response, field="items")

    @pytest.mark.asyncio
    async def test_get_order(self, client: AsyncClient, api, auth_headers, order):
        response = await client.get(f"{BASE}/{order['_id']}", headers=auth_headers)

        assert api.assert_success(response)["data"]["orderNumber"] == order["orderNumber"]


class TestChangeStatus:
    """PATCH /orders/{id}/status is checked against the flow."""

    @pytest.mark.asyncio
    async def test_operator_confirms(
        self, client: AsyncClient, api, headers_for, order, notifier
    ):
        response = await client.patch(
            f"{BASE}/{order['_id']}/status",
            json={"status": "confirmed"},
            headers=headers_for("operator-1", "operator"),
        )

        updated = api.assert_success(response)["data"]
        assert updated["status"] == "confirmed"
        assert [e["status"] for e in updated["statusHistory"]] == ["created", "confirmed"]
        assert updated["statusHistory"][-1]["updatedBy"] == "operator-1"
        notifier.assert_awaited_once()
        assert notifier.await_args.args[2] == "confirmed"

    @pytest.mark.asyncio
    async def test_wrong_role_is_forbidden(
        self, client: AsyncClient, api, auth_headers, order, notifier
    ):
        response = await client.patch(
            f"{BASE}/{order['_id']}/status", json={"status": "confirmed"}, headers=auth_headers
        )

        data = api.assert_error(response, 409, "FLOW_TRANSITION_FORBIDDEN")
        assert data["error"]["details"] == {
            "current_status": "created",
            "new_status": "confirmed",
            "role": "User",
        }
        notifier.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_edge_is_forbidden(self, client: AsyncClient, api, admin_headers, order):
        response = await client.patch(
            f"{BASE}/{order['_id']}/status", json={"status": "delivered"}, headers=admin_headers
        )

        api.assert_error(response, 409, "FLOW_TRANSITION_FORBIDDEN")

    @pytest.mark.asyncio
    async def test_rejection_keeps_reason(self, client: AsyncClient, api, admin_headers, order):
        response = await client.patch(
            f"{BASE}/{order['_id']}/status",
            json={"status": "rejected", "notes": "Out of stock"},
            headers=admin_headers,
        )

        updated = api.assert_success(response)["data"]
        assert updated["rejectionReason"] == "Out of stock"
        assert updated["statusHistory"][-1]["notes"] == "Out of stock"

    @pytest.mark.asyncio
    async def test_shop_flow_applies(
        self, client: AsyncClient, api, admin_headers, headers_for, order
    ):
        shop_id = order["shopId"]
        customized = await client.post(
            f"/api/v1/shops/{shop_id}/order-flow/customize", headers=admin_headers
        )
        flow = api.assert_success(customized)["data"]
        flow["steps"][0]["authorizedRoles"] = ["Courier"]
        await client.put(
            f"/api/v1/order-flows/{flow['_id']}",
            json={"steps": flow["steps"]},
            headers=admin_headers,
        )

        as_operator = await client.patch(
            f"{BASE}/{order['_id']}/status",
            json={"status": "confirmed"},
            headers=headers_for("operator-1", "operator"),
        )
        as_courier = await client.patch(
            f"{BASE}/{order['_id']}/status",
            json={"status": "confirmed"},
            headers=headers_for("courier-1", "courier"),
        )

        api.assert_error(as_operator, 409, "FLOW_TRANSITION_FORBIDDEN")
        assert api.assert_success(as_courier)["data"]["status"] == "confirmed"

    @pytest.mark.asyncio
    async def test_enforcement_can_be_disabled(
        self, client: AsyncClient, api, auth_headers, order
    ):
        config = get_app_config()
        relaxed = SimpleNamespace(
            features=config.features.model_copy(
                update={"order_flow_enforce_transitions": False}
            ),
            order_flow=config.order_flow,
        )

        with patch("orderflow.backend.services.order.get_app_config", return_value=relaxed):
            response = await client.patch(
                f"{BASE}/{order['_id']}/status", json={"status": "paid"}, headers=auth_headers
            )

        assert api.assert_success(response)["data"]["status"] == "paid"

    @pytest.mark.asyncio
    async def test_unknown_order_is_404(self, client: AsyncClient, api, admin_headers):
        response = await client.patch(
            f"{BASE}/missing/status", json={"status": "confirmed"}, headers=admin_headers
        )

        api.assert_error(response, 404, "RES_NOT_FOUND")


class TestDispatchAfterCommit:
    """Notifications only go out for changes that are already stored."""

    @staticmethod
    def _record_transaction_state(notifier) -> list[bool]:
        seen: list[bool] = []

        async def record(session, *args, **kwargs):
            seen.append(session.in_transaction())
            return []

        notifier.side_effect = record
        return seen

    @pytest.mark.asyncio
    async def test_placed_order_is_committed_first(
        self, client: AsyncClient, api, auth_headers, default_flow, make_user, make_shop, notifier
    ):
        seen = self._record_transaction_state(notifier)
        customer = await make_user()
        shop = await make_shop()

        response = await client.post(
            BASE,
            json={
                "customerId": customer.id,
                "shopId": shop.id,
                "items": [{"name": "Green Tea", "quantity": 1, "price": 3.5}],
            },
            headers=auth_headers,
        )

        api.assert_success(response, 201)
        assert seen == [False]

    @pytest.mark.asyncio
    async def test_status_change_is_committed_first(
        self, client: AsyncClient, api, admin_headers, order, notifier
    ):
        seen = self._record_transaction_state(notifier)

        response = await client.patch(
            f"{BASE}/{order['_id']}/status", json={"status": "confirmed"}, headers=admin_headers
        )

        api.assert_success(response)
        assert seen == [False]
