"""
Telegram Bot Services.

Order notification forwarding via Telegram.
"""

from orderflow.telegram.services.notifications import (
    NotificationResult,
    NotificationService,
    build_order_message,
    get_notification_service,
)

__all__ = [
    "NotificationResult",
    "NotificationService",
    "build_order_message",
    "get_notification_service",
]
