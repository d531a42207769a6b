"""
Order Service.

Order creation and status changes. A status change is checked against
the shop's order flow using the flow role of whoever makes it.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.core.config import get_app_config
from orderflow.backend.core.exceptions import TransitionNotAllowedError
from orderflow.backend.core.utils import format_order_number
from orderflow.backend.models.order import Order, OrderStatusHistory
from orderflow.backend.repositories.order import OrderRepository
from orderflow.backend.repositories.shop import ShopRepository
from orderflow.backend.repositories.user import UserRepository
from orderflow.backend.schemas.order import OrderCreate
from orderflow.backend.services.base import BaseService
from orderflow.backend.services.order_flow import OrderFlowService

INITIAL_STATUS = "created"
REJECTED_STATUS = "rejected"

# Relationships the notification layer reads
_NOTIFICATION_RELATIONS = ["shop", "customer", "courier", "status_history"]


def to_flow_role(user_role: str) -> str:
    """Map a marketplace user role (e.g. `shop_owner`) to its flow role (`ShopOwner`)."""
    return get_app_config().order_flow.user_role_map.get(user_role, user_role)


class OrderService(BaseService):
    """Service for orders and their status lifecycle."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = OrderRepository(session)
        self.users = UserRepository(session)
        self.shops = ShopRepository(session)
        self.flows = OrderFlowService(session)

    async def create_order(self, data: OrderCreate, created_by: str | None = None) -> Order:
        """
        Place an order in the `created` status.

        Raises:
            NotFoundError: If the customer, shop or courier does not exist
        """
        await self.users.get_by_id(data.customer_id)
        await self.shops.get_by_id(data.shop_id)
        if data.courier_id:
            await self.users.get_by_id(data.courier_id)

        items = [item.model_dump(mode="json") for item in data.items]
        total = round(sum(item["subtotal"] for item in items), 2)
        order_number = format_order_number(await self.repo.next_sequence())

        self._log_operation("Creating order", order_number=order_number, shop_id=data.shop_id)

        order = Order(
            order_number=order_number,
            customer_id=data.customer_id,
            shop_id=data.shop_id,
            courier_id=data.courier_id,
            items=items,
            total=Decimal(str(total)),
            status=INITIAL_STATUS,
            status_history=[OrderStatusHistory(status=INITIAL_STATUS, updated_by=created_by)],
        )
        self.session.add(order)
        await self._execute_db_operation("create_order", self.session.flush())
        await self.session.refresh(order, attribute_names=_NOTIFICATION_RELATIONS)
        return order

    async def get_order(self, order_id: str) -> Order:
        return await self.repo.get_by_id(order_id)

    async def change_status(
        self,
        order_id: str,
        new_status: str,
        user_role: str,
        updated_by: str | None = None,
        notes: str | None = None,
    ) -> Order:
        """
        Move an order to new_status.

        When transitions are enforced, the shop's flow must allow the move
        for the flow role that user_role maps to. Rejections keep notes as
        the rejection reason.

        Raises:
            NotFoundError: If order not found
            TransitionNotAllowedError: If the flow forbids the change
        """
        order = await self.repo.get_by_id(order_id)
        flow_role = to_flow_role(user_role)

        if get_app_config().features.order_flow_enforce_transitions:
            allowed = await self.flows.can_change_status(
                order.status, new_status, flow_role, order.shop_id
            )
            if not allowed:
                raise TransitionNotAllowedError(order.status, new_status, flow_role)

        self._log_operation(
            "Changing order status",
            order_id=order_id,
            from_status=order.status,
            to_status=new_status,
            role=flow_role,
        )

        order.status = new_status
        if new_status == REJECTED_STATUS:
            order.rejection_reason = notes
        await self.repo.add_history(order, new_status, updated_by, notes)
        return order
