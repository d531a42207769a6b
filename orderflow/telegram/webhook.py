"""
Telegram webhook route.

Telegram POSTs every update to application.telegram.webhook_path. The
route checks the secret header, then hands the update to the dispatcher,
where the next-status buttons are handled.
"""

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response, status

from orderflow.backend.core.config import get_app_config, get_settings
from orderflow.backend.core.logging import get_logger
from orderflow.backend.core.security import verify_webhook_secret

if TYPE_CHECKING:
    from aiogram import Bot, Dispatcher

logger = get_logger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def get_webhook_url(base_url: str) -> str:
    """Absolute webhook URL for a public base such as https://orders.example.com."""
    return base_url.rstrip("/") + get_app_config().application.telegram.webhook_path


def get_webhook_router(bot: "Bot", dp: "Dispatcher") -> APIRouter:
    """Router exposing the webhook and its health probe."""
    from aiogram.types import Update

    path = get_app_config().application.telegram.webhook_path
    router = APIRouter(tags=["telegram"])

    @router.post(path)
    async def receive_update(request: Request) -> Response:
        if get_settings().telegram_webhook_secret and not verify_webhook_secret(
            request.headers.get(SECRET_HEADER)
        ):
            logger.warning(
                "Rejected Telegram update with bad secret",
                extra={"client_ip": request.client.host if request.client else None},
            )
            return Response(status_code=status.HTTP_403_FORBIDDEN)

        try:
            update = Update.model_validate(await request.json(), context={"bot": bot})
            logger.debug(
                "Telegram update received",
                extra={"update_id": update.update_id, "update_type": update.event_type},
            )
            await dp.feed_update(bot, update)
        except Exception as e:
            # Telegram redelivers anything but a 200, and a broken update would loop forever.
            logger.error(
                "Failed to process Telegram update",
                extra={"error": str(e)},
                exc_info=True,
            )
        return Response(status_code=status.HTTP_200_OK)

    @router.get(path + "/health")
    async def webhook_health() -> dict:
        return {"status": "healthy", "webhook_path": path}

    return router
