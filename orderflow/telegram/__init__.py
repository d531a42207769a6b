"""
Telegram Bot Module.

aiogram v3 integration running in webhook mode inside the FastAPI
application. The bot forwards order status changes to the chats named in
the shop's order flow and handles the next-status buttons on those
messages.

Structure:
    orderflow/telegram/
    ├── bot.py               # Bot and dispatcher setup
    ├── webhook.py           # Webhook endpoint for FastAPI
    ├── handlers/            # /start, /help, next-status buttons
    ├── middlewares/         # Update logging, account lookup
    ├── keyboards/           # Next-status inline keyboard
    ├── callbacks/           # OrderFlowCallback
    └── services/            # Order notification forwarding

Environment Variables:
    TELEGRAM_BOT_TOKEN: Bot token from BotFather
    TELEGRAM_WEBHOOK_SECRET: Secret for webhook validation
"""

from orderflow.telegram.bot import create_bot, create_dispatcher, get_bot, get_dispatcher

__all__ = [
    "create_bot",
    "create_dispatcher",
    "get_bot",
    "get_dispatcher",
]
