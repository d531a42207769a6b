"""
Keyboard Builders.

Inline keyboards attached to bot messages.
"""

from orderflow.telegram.keyboards.order_flow import get_next_status_keyboard

__all__ = [
    "get_next_status_keyboard",
]
