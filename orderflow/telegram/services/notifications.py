"""
Order Notification Service.

Forwards order status changes to the Telegram destinations configured on
the matching flow step. Each message carries one inline button per next
status so recipients can move the order on from the chat.

Usage:
    service = get_notification_service()
    await service.handle_order_status_change(
        session,
        order,
        new_status="confirmed",
        updated_by=user.id,
    )
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from aiogram import html
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.core.config import get_app_config
from orderflow.backend.core.logging import get_logger, log_with_source
from orderflow.backend.core.utils import utc_now
from orderflow.backend.models.order import Order
from orderflow.backend.repositories.user import UserRepository
from orderflow.backend.services.order_flow import OrderFlowService
from orderflow.backend.services.placeholders import build_context
from orderflow.telegram.keyboards.order_flow import get_next_status_keyboard

logger = get_logger(__name__)

# Telegram allows roughly one message per second to the same chat
RATE_LIMIT_PER_CHAT = 20  # Max messages per minute per chat
RATE_LIMIT_WINDOW = 60  # Window in seconds


@dataclass
class NotificationResult:
    """Result of a notification send attempt."""

    success: bool
    chat_id: str
    message_id: int | None = None
    error: str | None = None
    rate_limited: bool = False
    timestamp: datetime = field(default_factory=utc_now)


def format_amount(value: Any) -> str:
    """12.0 -> "12", 12.5 -> "12.5"."""
    number = round(float(value), 2)
    return str(int(number)) if number.is_integer() else str(number)


def build_order_message(
    order: Order,
    step: dict[str, Any],
    updated_by_name: str,
    reason: str | None = None,
) -> str:
    """HTML text of an order status notification."""
    lines = [
        f"🔄 {html.bold(step.get('name', ''))}",
        f"{html.bold('Order ID:')} {html.code(order.order_number)}",
        f"{html.bold('Updated by:')} {html.quote(updated_by_name)}",
    ]
    if reason:
        lines.append(f"{html.bold('Reason:')} {html.quote(reason)}")

    lines.append("")
    lines.append(html.bold("Products:"))
    for item in order.items or []:
        quantity = item.get("quantity", 0)
        lines.append(
            f"- {html.quote(str(item.get('name', '')))} x{quantity} "
            f"({format_amount(item.get('price', 0))} x {quantity} = "
            f"{format_amount(item.get('subtotal', 0))})"
        )

    lines.append("")
    lines.append(f"{html.bold('Total:')} {format_amount(order.total)}")
    lines.append("")
    lines.append(
        f"{html.bold('Next step:')} {html.quote(step.get('description') or 'No description')}"
    )
    return "\n".join(lines)


class NotificationService:
    """
    Sends order notifications through the aiogram bot.

    Features:
    - Rate limiting per chat to stay under Telegram API limits
    - Per-destination failure isolation (one bad chat does not stop the rest)
    - Delivery logging with source="telegram"
    """

    def __init__(self) -> None:
        # Rate limiting: {chat_id: [timestamps]}, only chats sent to within the window
        self._rate_limits: dict[str, list[float]] = {}

    def _check_rate_limit(self, chat_id: str) -> bool:
        """
        Check if chat is within rate limits.

        Chats with no send inside the window are forgotten.

        Returns:
            True if within limits, False if rate limited
        """
        now = time.time()
        window_start = now - RATE_LIMIT_WINDOW

        stale = [
            chat for chat, stamps in self._rate_limits.items() if stamps[-1] <= window_start
        ]
        for chat in stale:
            del self._rate_limits[chat]

        recent = [ts for ts in self._rate_limits.get(chat_id, []) if ts > window_start]
        if len(recent) >= RATE_LIMIT_PER_CHAT:
            self._rate_limits[chat_id] = recent
            return False

        recent.append(now)
        self._rate_limits[chat_id] = recent
        return True

    async def send(
        self,
        chat_id: str,
        text: str,
        reply_markup: Any = None,
    ) -> NotificationResult:
        """
        Send an HTML message to a user, group or channel.

        Args:
            chat_id: Numeric chat ID or @username
            text: Message text (HTML)
            reply_markup: Optional inline keyboard

        Returns:
            NotificationResult with success status
        """
        from orderflow.telegram.bot import get_bot

        if not self._check_rate_limit(chat_id):
            log_with_source(
                logger,
                "telegram",
                "warning",
                "Rate limit exceeded for chat",
                chat_id=chat_id,
            )
            return NotificationResult(
                success=False,
                chat_id=chat_id,
                rate_limited=True,
                error="Rate limit exceeded",
            )

        try:
            bot = get_bot()
            message = await bot.send_message(
                chat_id=chat_id,
                text=text,
                parse_mode="HTML",
                reply_markup=reply_markup,
            )

            log_with_source(
                logger,
                "telegram",
                "info",
                "Notification sent",
                chat_id=chat_id,
                message_id=message.message_id,
            )
            return NotificationResult(
                success=True,
                chat_id=chat_id,
                message_id=message.message_id,
            )

        except Exception as e:
            log_with_source(
                logger,
                "telegram",
                "error",
                "Failed to send notification",
                chat_id=chat_id,
                error=str(e),
            )
            return NotificationResult(success=False, chat_id=chat_id, error=str(e))

    async def _updater_name(self, session: AsyncSession, updated_by: str | None) -> str:
        if not updated_by:
            return "System"
        user = await UserRepository(session).get_by_id_or_none(updated_by)
        return user.display_name if user is not None else "System"

    async def handle_order_status_change(
        self,
        session: AsyncSession,
        order: Order,
        new_status: str,
        updated_by: str | None = None,
        reason: str | None = None,
    ) -> list[NotificationResult]:
        """
        Notify every destination of the flow step for new_status.

        Never raises: a failed notification must not undo the status change
        that triggered it.

        Args:
            session: Database session (flow and user lookups)
            order: Order with shop, customer and courier loaded
            new_status: Status the order moved to
            updated_by: ID of the user who made the change
            reason: Optional reason shown in the message

        Returns:
            One NotificationResult per resolved destination
        """
        features = get_app_config().features
        if not (features.channel_telegram_enabled and features.order_flow_notifications_enabled):
            logger.debug(
                "Telegram notifications disabled, skipping",
                extra={"order_id": order.id, "status": new_status},
            )
            return []

        try:
            flows = OrderFlowService(session)
            step = await flows.get_step_by_status(new_status, order.shop_id)
            if step is None:
                log_with_source(
                    logger,
                    "telegram",
                    "info",
                    "No flow step for status",
                    order_id=order.id,
                    status=new_status,
                )
                return []

            destinations = flows.resolve_forwarding_destinations(step, build_context(order))
            if not destinations:
                return []

            text = build_order_message(
                order,
                step,
                await self._updater_name(session, updated_by),
                reason,
            )
            keyboard = get_next_status_keyboard(order.id, step.get("nextStatuses", []))

            results = []
            for destination in destinations:
                results.append(await self.send(destination["identifier"], text, keyboard))

        except Exception as e:
            log_with_source(
                logger,
                "telegram",
                "error",
                "Error handling order status change",
                order_id=order.id,
                status=new_status,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        log_with_source(
            logger,
            "telegram",
            "info",
            "Order status change forwarded",
            order_id=order.id,
            status=new_status,
            total=len(results),
            success=sum(1 for r in results if r.success),
        )
        return results


# Module-level singleton
_notification_service: NotificationService | None = None


def get_notification_service() -> NotificationService:
    """Get or create the notification service singleton."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service
