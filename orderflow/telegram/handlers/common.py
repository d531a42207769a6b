"""
Common Handlers.

Universal commands: /start and /help.
"""

from aiogram import Router, html
from aiogram.filters import Command, CommandStart
from aiogram.types import Message, User as TelegramUser

from orderflow.backend.core.logging import get_logger
from orderflow.backend.models.user import User
from orderflow.backend.services.order import to_flow_role

logger = get_logger(__name__)

router = Router(name="common")


@router.message(CommandStart())
async def cmd_start(message: Message, telegram_user: TelegramUser, account: User | None) -> None:
    """Greet the user and show whether their account is linked."""
    if account is None:
        text = (
            f"👋 Welcome, {html.bold(html.quote(telegram_user.first_name))}!\n\n"
            f"Your Telegram ID is {html.code(str(telegram_user.id))}.\n"
            f"Ask an admin to link it to your marketplace account to receive orders."
        )
    else:
        text = (
            f"👋 Welcome back, {html.bold(html.quote(account.display_name))}!\n\n"
            f"Order notifications for your role "
            f"({html.code(to_flow_role(account.role))}) will arrive here."
        )

    await message.answer(text)

    logger.info(
        "User started bot",
        extra={
            "telegram_id": telegram_user.id,
            "linked": account is not None,
        },
    )


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(
        "<b>📚 Available Commands</b>\n\n"
        "/start - Show your linked account\n"
        "/help - Show this help message\n\n"
        "Order notifications come with buttons for the next steps "
        "you are allowed to take."
    )
