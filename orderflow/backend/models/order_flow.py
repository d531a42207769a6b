"""
Order Flow Model.

A flow is the per-shop state machine for order statuses. Steps are kept
as one JSON document because the admin editor always replaces them
wholesale.
"""

from typing import Any

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from orderflow.backend.models.base import Base, JSONDocument, TimestampMixin, UUIDMixin


class OrderFlow(UUIDMixin, TimestampMixin, Base):
    """
    Order flow database model.

    `shop_id` is NULL for the system default flow. Each step in `steps`
    is a dict with the wire shape of OrderFlowStep (status, name,
    description, forwardingDestinations, authorizedRoles, nextStatuses,
    isActive, order).
    """

    __tablename__ = "order_flows"

    shop_id: Mapped[str | None] = mapped_column(
        String(36),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    steps: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        default=list,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
    )
    is_default: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
        index=True,
    )

    def active_step(self, status: str) -> dict[str, Any] | None:
        """Return the active step whose status matches, if any."""
        for step in self.steps or []:
            if step.get("status") == status and step.get("isActive", True):
                return step
        return None

    def __repr__(self) -> str:
        return f"<OrderFlow(id={self.id}, name={self.name!r}, shop_id={self.shop_id})>"
