"""
Default order flow seed.

The flow every shop uses until it is customized: operators confirm,
shop owners pack, couriers deliver and collect payment.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.core.logging import get_logger, log_with_source
from orderflow.backend.models.order_flow import OrderFlow
from orderflow.backend.repositories.order_flow import OrderFlowRepository
from orderflow.backend.schemas.order_flow import OrderFlowCreate
from orderflow.backend.services.order_flow import OrderFlowService

logger = get_logger(__name__)


def _destination(identifier: str, name: str, type_: str = "telegram_user") -> dict[str, Any]:
    return {"type": type_, "identifier": identifier, "name": name, "isActive": True}


SHOP_GROUP = _destination("{{shop.orders_chat_id}}", "Shop Orders Group", "telegram_group")
SHOP_OWNER = _destination("{{shop.owner.telegramId}}", "Shop Owner")
COURIER = _destination("{{courier.telegramId}}", "Courier")

DEFAULT_FLOW: dict[str, Any] = {
    "name": "Default Order Flow",
    "description": "Default order forwarding flow for all shops",
    "isDefault": True,
    "isActive": True,
    "steps": [
        {
            "status": "created",
            "name": "Order Created",
            "description": "Order has been created and needs operator confirmation",
            "forwardingDestinations": [SHOP_GROUP],
            "authorizedRoles": ["Operator", "Admin"],
            "nextStatuses": ["confirmed", "rejected"],
        },
        {
            "status": "confirmed",
            "name": "Order Confirmed",
            "description": "Order confirmed by operator, sent to shop owner",
            "forwardingDestinations": [SHOP_OWNER],
            "authorizedRoles": ["ShopOwner", "Admin"],
            "nextStatuses": ["packing", "rejected"],
        },
        {
            "status": "packing",
            "name": "Order Packing",
            "description": "Order is being packed by shop",
            "forwardingDestinations": [SHOP_OWNER],
            "authorizedRoles": ["ShopOwner", "Admin"],
            "nextStatuses": ["packed"],
        },
        {
            "status": "packed",
            "name": "Order Packed",
            "description": "Order has been packed and is ready for courier pickup",
            "forwardingDestinations": [COURIER],
            "authorizedRoles": ["Courier", "Admin"],
            "nextStatuses": ["courier_picked", "rejected"],
        },
        {
            "status": "courier_picked",
            "name": "Courier Picked Up",
            "description": "Order has been picked up by courier",
            "forwardingDestinations": [COURIER],
            "authorizedRoles": ["Courier", "Admin"],
            "nextStatuses": ["delivered"],
        },
        {
            "status": "delivered",
            "name": "Order Delivered",
            "description": "Order has been delivered to customer",
            "forwardingDestinations": [COURIER],
            "authorizedRoles": ["Courier", "Admin"],
            "nextStatuses": ["paid", "rejected"],
        },
        {
            "status": "paid",
            "name": "Order Paid",
            "description": "Order has been paid and completed",
            "forwardingDestinations": [],
            "authorizedRoles": ["Courier", "Admin"],
            "nextStatuses": [],
        },
        {
            "status": "rejected",
            "name": "Order Rejected",
            "description": "Order has been rejected",
            "forwardingDestinations": [],
            "authorizedRoles": ["Admin"],
            "nextStatuses": [],
        },
    ],
}


async def seed_default_flow(session: AsyncSession) -> OrderFlow | None:
    """
    Create the default flow unless one exists.

    Returns:
        The new flow, or None when a default flow was already present
    """
    if await OrderFlowRepository(session).get_default() is not None:
        log_with_source(logger, "seed", "info", "Default order flow already exists, skipping seed")
        return None

    flow = await OrderFlowService(session).create_flow(OrderFlowCreate.model_validate(DEFAULT_FLOW))
    log_with_source(logger, "seed", "info", "Default order flow seeded", flow_id=flow.id)
    return flow
