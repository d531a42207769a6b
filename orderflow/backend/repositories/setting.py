"""
Setting Repository.
"""

from sqlalchemy import func, or_, select

from orderflow.backend.models.setting import Setting
from orderflow.backend.repositories.base import BaseRepository


class SettingRepository(BaseRepository[Setting]):
    """Key/value runtime settings, unique by key."""

    model = Setting

    def _search_clause(self, search: str):
        pattern = f"%{search}%"
        return or_(Setting.key.ilike(pattern), Setting.description.ilike(pattern))

    async def get_by_key(self, key: str) -> Setting | None:
        return await self._one_or_none(select(Setting).where(Setting.key == key))

    async def list_page(
        self,
        limit: int = 20,
        offset: int = 0,
        search: str | None = None,
    ) -> tuple[list[Setting], int]:
        """
        One page of settings ordered by key, with the total match count.

        Args:
            limit: Page size
            offset: Number of rows to skip
            search: Optional substring matched against key and description

        Returns:
            Tuple of (settings, total)
        """
        query = select(Setting)
        count_query = select(func.count()).select_from(Setting)
        if search:
            query = query.where(self._search_clause(search))
            count_query = count_query.where(self._search_clause(search))

        result = await self.session.execute(
            query.order_by(Setting.key).limit(limit).offset(offset)
        )
        total = await self.session.execute(count_query)
        return list(result.scalars().all()), total.scalar_one()
