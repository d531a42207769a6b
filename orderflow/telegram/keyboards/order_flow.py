"""
Order flow keyboards.
"""

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from orderflow.backend.core.config import get_app_config
from orderflow.telegram.callbacks.order_flow import OrderFlowCallback


def get_next_status_keyboard(
    order_id: str,
    next_statuses: list[str],
) -> InlineKeyboardMarkup | None:
    """
    One button per next status that has a configured label.

    Statuses without a label in `order_flow.status_buttons` get no button.

    Returns:
        InlineKeyboardMarkup, or None when no status has a button
    """
    labels = get_app_config().order_flow.status_buttons
    builder = InlineKeyboardBuilder()
    count = 0

    for status in next_statuses:
        label = labels.get(status)
        if not label:
            continue
        builder.button(
            text=label,
            callback_data=OrderFlowCallback(status=status, order_id=order_id),
        )
        count += 1

    if count == 0:
        return None

    # One button per row
    builder.adjust(1)
    return builder.as_markup()
