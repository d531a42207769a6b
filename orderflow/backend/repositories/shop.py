"""
Shop and Telegram group repositories.
"""

from sqlalchemy import select

from orderflow.backend.models.shop import Shop
from orderflow.backend.models.telegram_group import TelegramGroup
from orderflow.backend.repositories.base import BaseRepository


class ShopRepository(BaseRepository[Shop]):
    model = Shop


class TelegramGroupRepository(BaseRepository[TelegramGroup]):
    """Groups the bot has been added to, keyed by their Telegram chat id."""

    model = TelegramGroup

    async def get_by_chat_id(self, chat_id: str) -> TelegramGroup | None:
        return await self._one_or_none(
            select(TelegramGroup).where(TelegramGroup.chat_id == str(chat_id))
        )

    async def list_unassigned(self) -> list[TelegramGroup]:
        """Groups not linked to any shop."""
        return await self._all(
            select(TelegramGroup).where(TelegramGroup.shop_id.is_(None)).order_by(TelegramGroup.title)
        )

    async def list_all(self) -> list[TelegramGroup]:
        return await self._all(select(TelegramGroup).order_by(TelegramGroup.title))
