"""
Order flow callback data.

Next-status buttons on forwarded order notifications carry the target
status and the order ID, packed as `order_flow:<status>:<order_id>`.
"""

from aiogram.filters.callback_data import CallbackData


class OrderFlowCallback(CallbackData, prefix="order_flow"):
    """
    Button press moving an order to a new status.

    Usage:
        button = InlineKeyboardButton(
            text="✅ Confirm",
            callback_data=OrderFlowCallback(status="confirmed", order_id=order.id).pack(),
        )

        @router.callback_query(OrderFlowCallback.filter())
        async def on_press(callback: CallbackQuery, callback_data: OrderFlowCallback):
            ...
    """

    status: str
    order_id: str
