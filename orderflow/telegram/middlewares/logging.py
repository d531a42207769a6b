"""
Update logging for the order forwarding bot.

One record per update on arrival and one on completion, all tagged
source="telegram". The update's identifiers are also bound into
structlog's context while the handler runs, so handler logs carry them.
Next-status button presses add the order id and the requested status.
"""

import time
from typing import Any, Awaitable, Callable

import structlog
from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject, Update

from orderflow.backend.core.logging import get_logger, log_with_source
from orderflow.telegram.callbacks.order_flow import OrderFlowCallback

logger = get_logger(__name__)

TEXT_PREVIEW_LENGTH = 50


def _sender(user: Any) -> dict[str, Any]:
    return {"user_id": user.id, "username": user.username} if user else {}


def _message_context(message: Message) -> dict[str, Any]:
    context = {"chat_id": message.chat.id, "chat_type": message.chat.type, **_sender(message.from_user)}
    text = message.text or ""
    if text.startswith("/"):
        context["command"] = text.split()[0]
    elif text:
        context["text_preview"] = text[:TEXT_PREVIEW_LENGTH]
    return context


def _callback_context(query: CallbackQuery) -> dict[str, Any]:
    context = {**_sender(query.from_user), "callback_data": query.data}
    if query.message:
        context["chat_id"] = query.message.chat.id
        context["chat_type"] = query.message.chat.type
    return {**context, **_button_press(query.data)}


def _button_press(callback_data: str | None) -> dict[str, Any]:
    """order_id and requested_status when the data is a next-status button."""
    if not callback_data or not callback_data.startswith(f"{OrderFlowCallback.__prefix__}:"):
        return {}
    try:
        press = OrderFlowCallback.unpack(callback_data)
    except (TypeError, ValueError):
        return {}
    return {"order_id": press.order_id, "requested_status": press.status}


class LoggingMiddleware(BaseMiddleware):
    """Outer middleware on dp.update."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        context = self._extract_context(event)
        started = time.perf_counter()

        def elapsed_ms() -> float:
            return round((time.perf_counter() - started) * 1000, 2)

        log_with_source(logger, "telegram", "info", "Telegram update received", **context)
        with structlog.contextvars.bound_contextvars(
            update_id=context.get("update_id"), order_id=context.get("order_id")
        ):
            try:
                result = await handler(event, data)
            except Exception as e:
                log_with_source(
                    logger,
                    "telegram",
                    "error",
                    "Telegram update failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    elapsed_ms=elapsed_ms(),
                    **context,
                )
                raise

        log_with_source(
            logger, "telegram", "debug", "Telegram update handled", elapsed_ms=elapsed_ms(), **context
        )
        return result

    @staticmethod
    def _extract_context(event: TelegramObject) -> dict[str, Any]:
        if not isinstance(event, Update):
            return {}
        context: dict[str, Any] = {"update_id": event.update_id, "update_type": event.event_type}
        if event.message:
            context.update(_message_context(event.message))
        elif event.callback_query:
            context.update(_callback_context(event.callback_query))
        return context
