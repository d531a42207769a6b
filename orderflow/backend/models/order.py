"""
Order Model.

Orders carry their own status string; the flow a status belongs to is
found by matching that string against the shop's flow steps.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orderflow.backend.core.utils import utc_now
from orderflow.backend.models.base import Base, JSONDocument, TimestampMixin, UUIDMixin
from orderflow.backend.models.shop import Shop
from orderflow.backend.models.user import User


class Order(UUIDMixin, TimestampMixin, Base):
    """
    Order database model.

    `items` is a list of `{name, quantity, price, subtotal}` dicts.
    """

    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
    )
    customer_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    shop_id: Mapped[str] = mapped_column(
        ForeignKey("shops.id"),
        nullable=False,
        index=True,
    )
    courier_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    items: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        default=list,
        nullable=False,
    )
    total: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(50),
        default="created",
        nullable=False,
        index=True,
    )
    rejection_reason: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    shop: Mapped[Shop] = relationship(lazy="selectin")
    customer: Mapped[User] = relationship(foreign_keys=[customer_id], lazy="selectin")
    courier: Mapped[User | None] = relationship(foreign_keys=[courier_id], lazy="selectin")
    status_history: Mapped[list["OrderStatusHistory"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderStatusHistory.timestamp",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Order(number={self.order_number!r}, status={self.status!r})>"


class OrderStatusHistory(UUIDMixin, Base):
    """One entry per status change of an order."""

    __tablename__ = "order_status_history"

    order_id: Mapped[str] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        nullable=False,
    )
    updated_by: Mapped[str | None] = mapped_column(
        String(36),
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    order: Mapped[Order] = relationship(back_populates="status_history")
