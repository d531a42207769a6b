"""
Setting Model.

Feature-flag style settings toggled from the admin dashboard.
"""

from typing import Any

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from orderflow.backend.models.base import Base, JSONDocument, TimestampMixin, UUIDMixin


class Setting(UUIDMixin, TimestampMixin, Base):
    """
    Setting database model.

    `value` holds a bool for `bool` flags, a string for `text` flags and
    one of `options` for `select` flags.
    """

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    flag_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    value: Mapped[Any] = mapped_column(
        JSONDocument,
        nullable=True,
    )
    options: Mapped[list[str] | None] = mapped_column(
        JSONDocument,
        nullable=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Setting(key={self.key!r}, flag_type={self.flag_type!r})>"
