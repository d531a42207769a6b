"""
Order Flow Service.

Business logic for order flows: resolving the flow that applies to a
shop, answering transition questions, and keeping the "one default flow"
and "one custom flow per shop" rules when flows are written.
"""

import copy
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.core.exceptions import ConflictError, NotFoundError
from orderflow.backend.models.order_flow import OrderFlow
from orderflow.backend.repositories.order_flow import OrderFlowRepository
from orderflow.backend.repositories.shop import ShopRepository
from orderflow.backend.schemas.order_flow import (
    OrderFlowCreate,
    OrderFlowStep,
    OrderFlowUpdate,
    ShopFlowCustomize,
)
from orderflow.backend.services.base import BaseService
from orderflow.backend.services.placeholders import resolve_destinations


def serialize_steps(steps: list[OrderFlowStep]) -> list[dict[str, Any]]:
    """Steps as stored JSON documents, with `order` renumbered to the index."""
    documents = []
    for index, step in enumerate(steps):
        document = step.model_dump(mode="json", by_alias=True)
        document["order"] = index
        documents.append(document)
    return documents


class OrderFlowService(BaseService):
    """
    Service for order flow business logic.

    Flow resolution for a shop: the shop's active custom flow, otherwise
    the active default flow.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = OrderFlowRepository(session)
        self.shop_repo = ShopRepository(session)

    async def get_all_flows(self) -> list[OrderFlow]:
        return await self.repo.list_all()

    async def get_flow_by_id(self, flow_id: str) -> OrderFlow:
        """
        Raises:
            NotFoundError: If flow not found
        """
        return await self.repo.get_by_id(flow_id)

    async def find_flow_for_shop(self, shop_id: str | None = None) -> OrderFlow | None:
        """The flow that applies to shop_id, or None when nothing is configured."""
        if shop_id:
            flow = await self.repo.get_active_for_shop(shop_id)
            if flow is not None:
                return flow
        return await self.repo.get_active_default()

    async def get_flow_for_shop(self, shop_id: str | None = None) -> OrderFlow:
        """
        Get the flow that applies to a shop.

        Raises:
            NotFoundError: If the shop has no custom flow and no active
                default flow exists
        """
        flow = await self.find_flow_for_shop(shop_id)
        if flow is None:
            raise NotFoundError("No order flow configured")
        return flow

    async def get_step_by_status(
        self,
        status: str,
        shop_id: str | None = None,
    ) -> dict[str, Any] | None:
        """Active step of the shop's flow for status, or None."""
        flow = await self.find_flow_for_shop(shop_id)
        if flow is None:
            return None
        return flow.active_step(status)

    async def get_next_statuses(self, status: str, shop_id: str | None = None) -> list[str]:
        step = await self.get_step_by_status(status, shop_id)
        return list(step.get("nextStatuses", [])) if step else []

    async def can_change_status(
        self,
        current_status: str,
        new_status: str,
        user_role: str,
        shop_id: str | None = None,
    ) -> bool:
        """
        Check whether user_role may move an order from current_status to new_status.

        Both the edge (new_status in the step's next statuses) and the role
        (user_role in the step's authorized roles) are required.
        """
        step = await self.get_step_by_status(current_status, shop_id)
        if step is None:
            return False
        if new_status not in step.get("nextStatuses", []):
            return False
        return user_role in step.get("authorizedRoles", [])

    async def get_forwarding_destinations(
        self,
        status: str,
        shop_id: str | None = None,
    ) -> list[dict[str, Any]]:
        step = await self.get_step_by_status(status, shop_id)
        return list(step.get("forwardingDestinations", [])) if step else []

    @staticmethod
    def resolve_forwarding_destinations(
        step: dict[str, Any],
        context: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Active destinations of step with placeholders filled from context."""
        return resolve_destinations(step.get("forwardingDestinations", []), context)

    async def _ensure_single_default(self, exclude_id: str | None = None) -> None:
        existing = await self.repo.get_default()
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(
                "A default order flow already exists",
                details={"default_flow_id": existing.id},
            )

    @staticmethod
    def _ensure_unbound_default(shop_id: str | None, is_default: bool) -> None:
        # The default flow applies to every shop and is owned by none.
        if is_default and shop_id:
            raise ConflictError(
                "The default order flow cannot belong to a shop",
                details={"shop_id": shop_id},
            )

    async def _ensure_single_custom(self, shop_id: str, exclude_id: str | None = None) -> None:
        existing = await self.repo.get_custom_for_shop(shop_id)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(
                "Shop already has a custom order flow",
                details={"shop_id": shop_id, "flow_id": existing.id},
            )

    async def create_flow(self, data: OrderFlowCreate) -> OrderFlow:
        """
        Create a flow.

        Raises:
            NotFoundError: If shop_id does not reference a shop
            ConflictError: If the flow would be a second default flow, a
                second custom flow for its shop, or a default bound to a shop
        """
        self._log_operation(
            "Creating order flow",
            name=data.name,
            shop_id=data.shop_id,
            is_default=data.is_default,
        )

        self._ensure_unbound_default(data.shop_id, data.is_default)
        if data.shop_id:
            await self.shop_repo.get_by_id(data.shop_id)
        if data.is_default:
            await self._ensure_single_default()
        elif data.shop_id:
            await self._ensure_single_custom(data.shop_id)

        flow = await self._execute_db_operation(
            "create_flow",
            self.repo.create(
                shop_id=data.shop_id,
                name=data.name,
                description=data.description,
                steps=serialize_steps(data.steps),
                is_active=data.is_active,
                is_default=data.is_default,
            ),
        )

        self._log_debug("Order flow created", flow_id=flow.id, steps=len(flow.steps))
        return flow

    async def update_flow(self, flow_id: str, data: OrderFlowUpdate) -> OrderFlow:
        """
        Replace the provided fields of a flow. Last write wins.

        Raises:
            NotFoundError: If flow not found
            ConflictError: Same rules as create_flow
        """
        flow = await self.repo.get_by_id(flow_id)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return flow

        if data.steps is not None:
            update_data["steps"] = serialize_steps(data.steps)

        shop_id = update_data.get("shop_id", flow.shop_id)
        is_default = update_data.get("is_default", flow.is_default)
        self._ensure_unbound_default(shop_id, is_default)
        if shop_id and shop_id != flow.shop_id:
            await self.shop_repo.get_by_id(shop_id)
        if is_default and not flow.is_default:
            await self._ensure_single_default(exclude_id=flow.id)
        if shop_id and not is_default:
            await self._ensure_single_custom(shop_id, exclude_id=flow.id)

        self._log_operation(
            "Updating order flow",
            flow_id=flow_id,
            fields=list(update_data.keys()),
        )

        return await self._execute_db_operation(
            "update_flow",
            self.repo.update(flow_id, **update_data),
        )

    async def delete_flow(self, flow_id: str) -> None:
        """
        Raises:
            NotFoundError: If flow not found
        """
        self._log_operation("Deleting order flow", flow_id=flow_id)
        await self._execute_db_operation("delete_flow", self.repo.delete(flow_id))

    async def set_default_flow(self, flow_id: str) -> OrderFlow:
        """
        Make flow_id the only default flow.

        Raises:
            NotFoundError: If flow not found
            ConflictError: If the flow is a shop's custom flow
        """
        flow = await self.repo.get_by_id(flow_id)
        self._ensure_unbound_default(flow.shop_id, True)
        self._log_operation("Setting default order flow", flow_id=flow_id)

        await self.repo.clear_default(exclude_id=flow.id)
        return await self._execute_db_operation(
            "set_default_flow",
            self.repo.update(flow.id, is_default=True),
        )

    async def customize_flow_for_shop(
        self,
        shop_id: str,
        data: ShopFlowCustomize | None = None,
    ) -> OrderFlow:
        """
        Give a shop its own copy of the flow.

        Without edited steps the currently applicable flow is deep-copied.
        An existing custom flow is updated in place.

        Raises:
            NotFoundError: If the shop does not exist, or no flow exists to copy
        """
        await self.shop_repo.get_by_id(shop_id)
        existing = await self.repo.get_custom_for_shop(shop_id)

        if data is not None and data.steps is not None:
            steps = serialize_steps(data.steps)
            source = existing
        else:
            source = existing or await self.get_flow_for_shop(shop_id)
            steps = [
                {**copy.deepcopy(step), "order": index}
                for index, step in enumerate(source.steps)
            ]

        name = data.name if data is not None and data.name else None
        description = data.description if data is not None else None

        if existing is not None:
            self._log_operation("Updating custom order flow", shop_id=shop_id, flow_id=existing.id)
            updates: dict[str, Any] = {"steps": steps, "is_active": True}
            if name:
                updates["name"] = name
            if description is not None:
                updates["description"] = description
            return await self._execute_db_operation(
                "customize_flow",
                self.repo.update(existing.id, **updates),
            )

        if source is None:
            source = await self.repo.get_default()

        self._log_operation("Creating custom order flow", shop_id=shop_id)
        return await self._execute_db_operation(
            "customize_flow",
            self.repo.create(
                shop_id=shop_id,
                name=name or (source.name if source is not None else "Custom Order Flow"),
                description=description if description is not None else (
                    source.description if source is not None else None
                ),
                steps=steps,
                is_active=True,
                is_default=False,
            ),
        )

    async def reset_shop_to_default(self, shop_id: str) -> OrderFlow:
        """
        Delete the shop's custom flow and return the flow that now applies.

        Raises:
            NotFoundError: If the shop does not exist or no default flow exists
        """
        await self.shop_repo.get_by_id(shop_id)
        custom = await self.repo.get_custom_for_shop(shop_id)
        if custom is not None:
            self._log_operation("Resetting shop to default order flow", shop_id=shop_id)
            await self._execute_db_operation("reset_shop_flow", self.repo.delete(custom.id))
        return await self.get_flow_for_shop(shop_id)
