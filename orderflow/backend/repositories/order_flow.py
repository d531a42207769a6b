"""
Order Flow Repository.

At most one flow carries is_default and at most one custom flow exists
per shop; the service enforces both, these queries only look them up.
"""

from sqlalchemy import select, true, update

from orderflow.backend.models.order_flow import OrderFlow
from orderflow.backend.repositories.base import BaseRepository


class OrderFlowRepository(BaseRepository[OrderFlow]):
    model = OrderFlow

    async def list_all(self) -> list[OrderFlow]:
        """All flows, newest first."""
        return await self._all(select(OrderFlow).order_by(OrderFlow.created_at.desc()))

    async def get_active_for_shop(self, shop_id: str) -> OrderFlow | None:
        return await self._one_or_none(
            select(OrderFlow)
            .where(
                OrderFlow.shop_id == shop_id,
                OrderFlow.is_active.is_(true()),
                OrderFlow.is_default.is_not(true()),
            )
            .order_by(OrderFlow.created_at.desc())
        )

    async def get_custom_for_shop(self, shop_id: str) -> OrderFlow | None:
        """The shop's own flow, active or not."""
        return await self._one_or_none(
            select(OrderFlow).where(OrderFlow.shop_id == shop_id, OrderFlow.is_default.is_not(true()))
        )

    async def get_active_default(self) -> OrderFlow | None:
        return await self._one_or_none(
            select(OrderFlow).where(OrderFlow.is_default.is_(true()), OrderFlow.is_active.is_(true()))
        )

    async def get_default(self) -> OrderFlow | None:
        return await self._one_or_none(select(OrderFlow).where(OrderFlow.is_default.is_(true())))

    async def clear_default(self, exclude_id: str | None = None) -> None:
        """Unset is_default everywhere except on exclude_id."""
        stmt = update(OrderFlow).where(OrderFlow.is_default.is_(true()))
        if exclude_id is not None:
            stmt = stmt.where(OrderFlow.id != exclude_id)
        await self.session.execute(
            stmt.values(is_default=False).execution_options(synchronize_session="fetch")
        )
