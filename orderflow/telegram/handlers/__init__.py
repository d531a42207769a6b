"""
Telegram Bot Handlers.

- common.py: /start, /help
- order_flow.py: next-status buttons on order notifications
"""

from aiogram import Router

from orderflow.telegram.handlers.common import router as common_router
from orderflow.telegram.handlers.order_flow import router as order_flow_router

__all__ = [
    "get_all_routers",
    "common_router",
    "order_flow_router",
]


def get_all_routers() -> list[Router]:
    """Routers to include in the dispatcher."""
    return [
        common_router,
        order_flow_router,
    ]
