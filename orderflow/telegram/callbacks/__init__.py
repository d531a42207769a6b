"""
Callback Data Factories.

Type-safe callback data using aiogram's CallbackData factory.
"""

from orderflow.telegram.callbacks.order_flow import OrderFlowCallback

__all__ = [
    "OrderFlowCallback",
]
