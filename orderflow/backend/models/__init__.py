"""
Database models.

Importing this package registers every table on `Base.metadata`
(used by `create_all_tables()` and Alembic autogenerate).
"""

from orderflow.backend.models.base import Base
from orderflow.backend.models.order import Order, OrderStatusHistory
from orderflow.backend.models.order_flow import OrderFlow
from orderflow.backend.models.setting import Setting
from orderflow.backend.models.shop import Shop
from orderflow.backend.models.telegram_group import TelegramGroup
from orderflow.backend.models.user import User

__all__ = [
    "Base",
    "Order",
    "OrderFlow",
    "OrderStatusHistory",
    "Setting",
    "Shop",
    "TelegramGroup",
    "User",
]
