"""
Outer update middlewares for the order forwarding bot.

Both run before filters: logging first so the account lookup is logged
with the update's context.
"""

from typing import TYPE_CHECKING

from orderflow.telegram.middlewares.auth import AccountMiddleware
from orderflow.telegram.middlewares.logging import LoggingMiddleware

if TYPE_CHECKING:
    from aiogram import Dispatcher

__all__ = ["AccountMiddleware", "LoggingMiddleware", "setup_middlewares"]


def setup_middlewares(dp: "Dispatcher") -> None:
    for middleware in (LoggingMiddleware(), AccountMiddleware()):
        dp.update.outer_middleware(middleware)
