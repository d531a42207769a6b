"""
Order Repository.
"""

from sqlalchemy import func, select

from orderflow.backend.models.order import Order, OrderStatusHistory
from orderflow.backend.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """Repository for Order model and its status history."""

    model = Order

    async def next_sequence(self) -> int:
        """Next order sequence number (count of orders plus one)."""
        result = await self.session.execute(select(func.count()).select_from(Order))
        return result.scalar_one() + 1

    async def add_history(
        self,
        order: Order,
        status: str,
        updated_by: str | None,
        notes: str | None = None,
    ) -> OrderStatusHistory:
        """Append a status history entry to the order."""
        entry = OrderStatusHistory(status=status, updated_by=updated_by, notes=notes)
        order.status_history.append(entry)
        await self.session.flush()
        return entry
