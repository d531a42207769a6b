"""
Account Middleware.

Links the Telegram sender to a marketplace account. Each update gets its
own database session; the handler sees it as `db`, and the matching
account (or None) as `account`.
"""

from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update

from orderflow.backend.core.database import get_session_factory
from orderflow.backend.core.logging import get_logger
from orderflow.backend.repositories.user import UserRepository

logger = get_logger(__name__)


class AccountMiddleware(BaseMiddleware):
    """
    Resolve the sender's account and provide a database session.

    The session is committed when the handler returns and rolled back
    when it raises. Inactive or suspended accounts are treated as unknown.

    Usage:
        dp.update.outer_middleware(AccountMiddleware())

        @router.callback_query(...)
        async def handler(callback: CallbackQuery, db: AsyncSession, account: User | None):
            ...
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        user = None
        if isinstance(event, Update):
            if event.message:
                user = event.message.from_user
            elif event.callback_query:
                user = event.callback_query.from_user

        session_factory = get_session_factory()
        async with session_factory() as session:
            account = None
            if user is not None:
                account = await UserRepository(session).get_by_telegram_id(str(user.id))
                if account is not None and account.status != "active":
                    logger.warning(
                        "Telegram user linked to inactive account",
                        extra={"telegram_id": user.id, "status": account.status},
                    )
                    account = None

            data["db"] = session
            data["account"] = account
            data["telegram_user"] = user

            try:
                result = await handler(event, data)
                await session.commit()
                return result
            except Exception:
                await session.rollback()
                raise
