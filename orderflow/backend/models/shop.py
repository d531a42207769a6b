"""
Shop Model.
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orderflow.backend.models.base import Base, TimestampMixin, UUIDMixin
from orderflow.backend.models.user import User


class Shop(UUIDMixin, TimestampMixin, Base):
    """
    Shop database model.

    `orders_chat_id` is the Telegram chat that receives the shop's order
    notifications; flows reference it through the
    `{{ shop.orders_chat_id }}` placeholder.
    """

    __tablename__ = "shops"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    orders_chat_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        nullable=False,
    )

    owner: Mapped[User] = relationship(lazy="selectin")

    def __repr__(self) -> str:
        return f"<Shop(id={self.id}, name={self.name!r})>"
