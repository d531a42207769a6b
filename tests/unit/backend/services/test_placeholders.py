"""
Unit Tests for Forwarding Destination Placeholders.
"""

from types import SimpleNamespace

import pytest

from orderflow.backend.services.placeholders import (
    build_context,
    has_placeholder,
    lookup,
    resolve_destinations,
    resolve_identifier,
)

CONTEXT = {
    "shop": {"orders_chat_id": "-100200300", "owner": {"telegramId": "555"}},
    "courier": {"telegramId": None},
    "customer": {"telegramId": "  "},
}


class TestResolveIdentifier:
    """Tests for single identifier substitution."""

    @pytest.mark.parametrize(
        "identifier",
        ["{{shop.orders_chat_id}}", "{{ shop.orders_chat_id }}", "{{shop.orders_chat_id  }}"],
    )
    def test_whitespace_inside_braces_is_allowed(self, identifier):
        assert resolve_identifier(identifier, CONTEXT) == "-100200300"

    def test_nested_path(self):
        assert resolve_identifier("{{shop.owner.telegramId}}", CONTEXT) == "555"

    def test_literal_identifier_is_kept(self):
        assert resolve_identifier("@orders_channel", CONTEXT) == "@orders_channel"

    def test_missing_value_is_unresolved(self):
        assert resolve_identifier("{{courier.telegramId}}", CONTEXT) is None

    def test_blank_value_is_unresolved(self):
        assert resolve_identifier("{{customer.telegramId}}", CONTEXT) is None

    def test_unknown_path_is_unresolved(self):
        assert resolve_identifier("{{warehouse.chat}}", CONTEXT) is None

    def test_partly_resolved_template_is_unresolved(self):
        assert resolve_identifier("{{shop.orders_chat_id}}-{{courier.telegramId}}", CONTEXT) is None


class TestLookup:
    def test_path_through_non_dict_is_none(self):
        assert lookup({"shop": "flat"}, "shop.owner") is None

    def test_values_are_stringified(self):
        assert lookup({"order": {"number": 42}}, "order.number") == "42"

    def test_has_placeholder(self):
        assert has_placeholder("{{ courier.telegramId }}") is True
        assert has_placeholder("-100123") is False
        assert has_placeholder("") is False


class TestResolveDestinations:
    """Tests for resolving a step's destination list."""

    def test_resolves_drops_and_skips(self):
        destinations = [
            {"type": "telegram_group", "identifier": "{{shop.orders_chat_id}}", "isActive": True},
            {"type": "telegram_user", "identifier": "{{courier.telegramId}}", "isActive": True},
            {"type": "telegram_user", "identifier": "777", "isActive": False},
            {"type": "telegram_channel", "identifier": "@news", "name": "News"},
        ]

        resolved = resolve_destinations(destinations, CONTEXT)

        assert resolved == [
            {"type": "telegram_group", "identifier": "-100200300", "isActive": True},
            {"type": "telegram_channel", "identifier": "@news", "name": "News"},
        ]

    def test_inputs_are_not_modified(self):
        destinations = [
            {"type": "telegram_group", "identifier": "{{shop.orders_chat_id}}", "isActive": True}
        ]

        resolve_destinations(destinations, CONTEXT)

        assert destinations[0]["identifier"] == "{{shop.orders_chat_id}}"


class TestBuildContext:
    """Tests for the order placeholder context."""

    def test_reads_shop_owner_courier_and_customer(self):
        order = SimpleNamespace(
            id="order-1",
            order_number="000001",
            status="packed",
            shop=SimpleNamespace(
                id="shop-1",
                name="Corner Shop",
                orders_chat_id="-100200300",
                owner=SimpleNamespace(telegram_id="555"),
            ),
            courier=SimpleNamespace(telegram_id="888"),
            customer=SimpleNamespace(telegram_id="999"),
        )

        context = build_context(order)

        assert context["shop"]["orders_chat_id"] == "-100200300"
        assert context["shop"]["owner"]["telegramId"] == "555"
        assert context["courier"]["telegramId"] == "888"
        assert context["customer"]["telegramId"] == "999"
        assert context["order"]["order_number"] == "000001"

    def test_missing_courier_yields_none(self):
        order = SimpleNamespace(
            id="order-1", order_number="000001", status="created", shop=None, courier=None, customer=None
        )

        context = build_context(order)

        assert context["courier"]["telegramId"] is None
        assert context["shop"]["owner"]["telegramId"] is None
