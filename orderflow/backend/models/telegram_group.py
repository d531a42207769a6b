"""
Telegram Group Model.

Groups the bot has been added to. A group with no shop is unassigned and
can be linked to a shop from the admin dashboard.
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from orderflow.backend.models.base import Base, TimestampMixin, UUIDMixin


class TelegramGroup(UUIDMixin, TimestampMixin, Base):
    """Telegram group database model."""

    __tablename__ = "telegram_groups"

    chat_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
    )
    title: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    type: Mapped[str] = mapped_column(
        String(20),
        default="group",
        nullable=False,
    )
    shop_id: Mapped[str | None] = mapped_column(
        ForeignKey("shops.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<TelegramGroup(chat_id={self.chat_id!r}, title={self.title!r})>"
