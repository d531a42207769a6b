"""
Setting Service.

CRUD for feature-flag settings with value/type consistency checks.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.core.exceptions import ValidationError
from orderflow.backend.models.setting import Setting
from orderflow.backend.repositories.setting import SettingRepository
from orderflow.backend.schemas.setting import SettingCreate, SettingUpdate, check_setting_value
from orderflow.backend.services.base import BaseService


class SettingService(BaseService):
    """Service for settings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = SettingRepository(session)

    async def create_setting(self, data: SettingCreate) -> Setting:
        """
        Raises:
            ConflictError: If the key is taken
        """
        self._ensure_absent(
            await self.repo.get_by_key(data.key),
            f"Setting '{data.key}' already exists",
            key=data.key,
        )

        self._log_operation("Creating setting", key=data.key, flag_type=data.flag_type)
        return await self._execute_db_operation(
            "create_setting",
            self.repo.create(**data.model_dump()),
        )

    async def get_setting(self, setting_id: str) -> Setting:
        return await self.repo.get_by_id(setting_id)

    async def list_settings_paginated(
        self,
        limit: int = 20,
        offset: int = 0,
        search: str | None = None,
    ) -> tuple[list[Setting], int]:
        return await self.repo.list_page(limit=limit, offset=offset, search=search)

    async def update_setting(self, setting_id: str, data: SettingUpdate) -> Setting:
        """
        Update a setting. The merged flag type, value and options must agree.

        Raises:
            NotFoundError: If setting not found
            ValidationError: If the merged value does not fit the flag type
        """
        setting = await self.repo.get_by_id(setting_id)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return setting

        try:
            check_setting_value(
                update_data.get("flag_type", setting.flag_type),
                update_data.get("value", setting.value),
                update_data.get("options", setting.options),
            )
        except ValueError as e:
            raise ValidationError(str(e), details={"value": str(e)}) from e

        self._log_operation(
            "Updating setting",
            setting_id=setting_id,
            fields=list(update_data.keys()),
        )
        return await self._execute_db_operation(
            "update_setting",
            self.repo.update(setting_id, **update_data),
        )

    async def delete_setting(self, setting_id: str) -> None:
        self._log_operation("Deleting setting", setting_id=setting_id)
        await self._execute_db_operation("delete_setting", self.repo.delete(setting_id))
