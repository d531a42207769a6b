"""
Order Flow Handlers.

Handles the next-status buttons attached to forwarded order notifications.
"""

from aiogram import Router
from aiogram.types import CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.core.exceptions import NotFoundError, TransitionNotAllowedError
from orderflow.backend.core.logging import get_logger, log_with_source
from orderflow.backend.models.user import User
from orderflow.backend.services.order import OrderService
from orderflow.telegram.callbacks.order_flow import OrderFlowCallback
from orderflow.telegram.services.notifications import get_notification_service

logger = get_logger(__name__)

router = Router(name="order_flow")


@router.callback_query(OrderFlowCallback.filter())
async def on_order_flow_button(
    callback: CallbackQuery,
    callback_data: OrderFlowCallback,
    db: AsyncSession,
    account: User | None,
) -> None:
    """
    Move the order to the pressed status.

    The presser must have a linked account whose flow role is authorized
    on the order's current step.
    """
    if account is None:
        await callback.answer(
            "⛔ Your Telegram account is not linked to a marketplace account.",
            show_alert=True,
        )
        return

    service = OrderService(db)
    try:
        order = await service.change_status(
            callback_data.order_id,
            callback_data.status,
            account.role,
            updated_by=account.id,
        )
    except NotFoundError:
        await callback.answer("❌ Order not found.", show_alert=True)
        return
    except TransitionNotAllowedError as e:
        log_with_source(
            logger,
            "telegram",
            "warning",
            "Order status change refused",
            order_id=callback_data.order_id,
            **e.details,
        )
        await callback.answer("⛔ You don't have permission for this action.", show_alert=True)
        return

    await db.commit()
    await get_notification_service().handle_order_status_change(
        db,
        order,
        callback_data.status,
        updated_by=account.id,
    )

    await callback.answer(f"✅ Order {order.order_number}: {callback_data.status}")

    # The buttons belong to the previous step
    if isinstance(callback.message, Message):
        await callback.message.edit_reply_markup(reply_markup=None)
