"""
Forwarding destination placeholders.

Destination identifiers may be `{{ path }}` templates such as
`{{shop.orders_chat_id}}` or `{{ courier.telegramId }}`. They are resolved
against a context built from the order at notification time.
"""

import re
from typing import Any

from orderflow.backend.core.logging import get_logger

logger = get_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][\w.]*)\s*\}\}")


def has_placeholder(identifier: str) -> bool:
    return bool(PLACEHOLDER_PATTERN.search(identifier or ""))


def lookup(context: dict[str, Any], path: str) -> str | None:
    """Follow a dotted path through nested dicts; None when missing or empty."""
    value: Any = context
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
        if value is None:
            return None
    text = str(value).strip()
    return text or None


def resolve_identifier(identifier: str, context: dict[str, Any]) -> str | None:
    """
    Substitute every placeholder in identifier.

    Returns None if any placeholder cannot be resolved, so the caller can
    drop the destination instead of sending to a half-filled address.
    """
    missing: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        value = lookup(context, match.group(1))
        if value is None:
            missing.append(match.group(1))
            return ""
        return value

    resolved = PLACEHOLDER_PATTERN.sub(_replace, identifier).strip()
    if missing or not resolved:
        return None
    return resolved


def build_context(order: Any) -> dict[str, Any]:
    """
    Placeholder context for an order.

    Expects the ORM order with its shop (and the shop's owner), customer
    and courier relationships loaded.
    """
    shop = getattr(order, "shop", None)
    owner = getattr(shop, "owner", None) if shop is not None else None
    courier = getattr(order, "courier", None)
    customer = getattr(order, "customer", None)

    return {
        "order": {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status,
        },
        "shop": {
            "id": getattr(shop, "id", None),
            "name": getattr(shop, "name", None),
            "orders_chat_id": getattr(shop, "orders_chat_id", None),
            "owner": {"telegramId": getattr(owner, "telegram_id", None)},
        },
        "courier": {"telegramId": getattr(courier, "telegram_id", None)},
        "customer": {"telegramId": getattr(customer, "telegram_id", None)},
    }


def resolve_destinations(
    destinations: list[dict[str, Any]],
    context: dict[str, Any],
) -> list[dict[str, Any]]:
    """
    Active destinations with placeholders substituted.

    Inactive destinations are skipped; destinations whose identifier does
    not resolve are dropped with a warning.
    """
    resolved = []
    for destination in destinations:
        if not destination.get("isActive", True):
            continue

        identifier = resolve_identifier(destination.get("identifier", ""), context)
        if identifier is None:
            logger.warning(
                "Dropping unresolved forwarding destination",
                extra={
                    "destination_type": destination.get("type"),
                    "identifier": destination.get("identifier"),
                },
            )
            continue

        resolved.append({**destination, "identifier": identifier})
    return resolved
