"""
User Model.

Marketplace users. Only the fields the order flow needs are stored:
the Telegram identity used for notifications and the role that maps
onto flow roles.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from orderflow.backend.core.utils import full_name
from orderflow.backend.models.base import Base, TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, Base):
    """User database model."""

    __tablename__ = "users"

    telegram_id: Mapped[str | None] = mapped_column(
        String(64),
        unique=True,
        nullable=True,
        index=True,
    )
    username: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    first_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    last_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        default="client",
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        nullable=False,
    )

    @property
    def display_name(self) -> str:
        return full_name(self.first_name, self.last_name) or self.username or "Unknown"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role={self.role!r})>"
