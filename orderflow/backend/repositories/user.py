"""
User Repository.
"""

from sqlalchemy import func, or_, select

from orderflow.backend.models.user import User
from orderflow.backend.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_telegram_id(self, telegram_id: str) -> User | None:
        return await self._one_or_none(select(User).where(User.telegram_id == str(telegram_id)))

    async def list_page(
        self,
        limit: int = 20,
        offset: int = 0,
        search: str | None = None,
        role: str | None = None,
    ) -> tuple[list[User], int]:
        """Users matching the optional search text and role, with total count."""
        conditions = []
        if role:
            conditions.append(User.role == role)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    User.telegram_id.ilike(pattern),
                    User.username.ilike(pattern),
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                )
            )

        result = await self.session.execute(
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        total = await self.session.execute(
            select(func.count()).select_from(User).where(*conditions)
        )
        return list(result.scalars().all()), total.scalar_one()

    async def list_with_telegram(self) -> list[User]:
        """Users that have a Telegram ID, i.e. can receive notifications."""
        return await self._all(
            select(User).where(User.telegram_id.is_not(None)).order_by(User.username)
        )
