"""
Directory Service.

Shops, users and Telegram groups: the supporting entities that order
flows and notifications refer to.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.models.shop import Shop
from orderflow.backend.models.telegram_group import TelegramGroup
from orderflow.backend.models.user import User
from orderflow.backend.repositories.shop import ShopRepository, TelegramGroupRepository
from orderflow.backend.repositories.user import UserRepository
from orderflow.backend.schemas.shop import ShopCreate, TelegramGroupCreate
from orderflow.backend.schemas.user import UserCreate
from orderflow.backend.services.base import BaseService


class DirectoryService(BaseService):
    """Service for shops, users and groups."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.shops = ShopRepository(session)
        self.users = UserRepository(session)
        self.groups = TelegramGroupRepository(session)

    async def create_user(self, data: UserCreate) -> User:
        """
        Raises:
            ConflictError: If the Telegram ID is already registered
        """
        if data.telegram_id:
            self._ensure_absent(
                await self.users.get_by_telegram_id(data.telegram_id),
                "Telegram ID already registered",
                telegram_id=data.telegram_id,
            )
        self._log_operation("Creating user", role=data.role)
        return await self._execute_db_operation(
            "create_user",
            self.users.create(**data.model_dump()),
        )

    async def list_users_paginated(
        self,
        limit: int = 20,
        offset: int = 0,
        search: str | None = None,
        role: str | None = None,
    ) -> tuple[list[User], int]:
        return await self.users.list_page(limit=limit, offset=offset, search=search, role=role)

    async def create_shop(self, data: ShopCreate) -> Shop:
        """
        Raises:
            NotFoundError: If the owner does not exist
        """
        await self.users.get_by_id(data.owner_id)
        self._log_operation("Creating shop", name=data.name)
        return await self._execute_db_operation(
            "create_shop",
            self.shops.create(**data.model_dump()),
        )

    async def get_shop(self, shop_id: str) -> Shop:
        return await self.shops.get_by_id(shop_id)

    async def create_group(self, data: TelegramGroupCreate) -> TelegramGroup:
        """
        Raises:
            ConflictError: If the chat is already registered
            NotFoundError: If shop_id does not reference a shop
        """
        self._ensure_absent(
            await self.groups.get_by_chat_id(data.chat_id),
            "Telegram group already registered",
            chat_id=data.chat_id,
        )
        if data.shop_id:
            await self.shops.get_by_id(data.shop_id)
        self._log_operation("Registering Telegram group", chat_id=data.chat_id)
        return await self._execute_db_operation(
            "create_group",
            self.groups.create(**data.model_dump()),
        )

    async def list_unassigned_groups(self) -> list[TelegramGroup]:
        return await self.groups.list_unassigned()
