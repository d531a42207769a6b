"""
aiogram Bot and Dispatcher for order forwarding.

Both are built on first use so that importing the package never needs a
token. The API process shares one Bot between the webhook route and the
notification service.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from orderflow.backend.core.logging import get_logger

if TYPE_CHECKING:
    from aiogram import Bot, Dispatcher

logger = get_logger(__name__)


def create_bot() -> "Bot":
    """
    Build a Bot that sends HTML-formatted messages.

    Raises:
        RuntimeError: TELEGRAM_BOT_TOKEN is empty.
    """
    from aiogram import Bot
    from aiogram.client.default import DefaultBotProperties
    from aiogram.enums import ParseMode

    from orderflow.backend.core.config import get_settings

    token = get_settings().telegram_bot_token
    if not token:
        raise RuntimeError(
            "TELEGRAM_BOT_TOKEN is not set; order forwarding needs a bot token "
            "(environment variable or config/.env)"
        )

    logger.info("Telegram bot created")
    return Bot(token=token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))


def create_dispatcher() -> "Dispatcher":
    """Dispatcher with the logging and account middlewares and every handler router."""
    from aiogram import Dispatcher

    from orderflow.telegram.handlers import get_all_routers
    from orderflow.telegram.middlewares import setup_middlewares

    # Order state lives in the database; the dispatcher keeps no FSM storage of its own.
    dispatcher = Dispatcher()
    setup_middlewares(dispatcher)
    dispatcher.include_routers(*get_all_routers())

    logger.info(
        "Telegram dispatcher created",
        extra={"update_types": dispatcher.resolve_used_update_types()},
    )
    return dispatcher


@lru_cache
def get_bot() -> "Bot":
    return create_bot()


@lru_cache
def get_dispatcher() -> "Dispatcher":
    return create_dispatcher()


async def register_webhook(bot: "Bot", webhook_url: str, secret_token: str) -> None:
    """Point Telegram at our webhook, dropping updates queued while we were down."""
    await bot.set_webhook(
        url=webhook_url,
        secret_token=secret_token or None,
        drop_pending_updates=True,
        allowed_updates=get_dispatcher().resolve_used_update_types(),
    )
    logger.info("Telegram webhook registered", extra={"webhook_url": webhook_url})


async def close_bot(remove_webhook: bool = False) -> None:
    """Close the shared Bot session; the next get_bot() builds a fresh one."""
    if get_bot.cache_info().currsize == 0:
        return

    bot = get_bot()
    if remove_webhook:
        await bot.delete_webhook()
    await bot.session.close()
    get_bot.cache_clear()
    logger.info("Telegram bot session closed", extra={"webhook_removed": remove_webhook})
