"""
FastAPI application for the order flow engine.

Serves the REST API under application.api_prefix, the health probes and,
when channel_telegram_enabled is set, the Telegram webhook.

    uvicorn orderflow.backend.main:app
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orderflow.backend.api import health
from orderflow.backend.api.v1 import router as api_v1_router
from orderflow.backend.core.config import get_app_config, get_settings
from orderflow.backend.core.database import dispose_engine
from orderflow.backend.core.exception_handlers import register_exception_handlers
from orderflow.backend.core.logging import get_logger, setup_logging
from orderflow.backend.core.middleware import RequestContextMiddleware
from orderflow.backend.core.startup_checks import run_startup_checks

logger = get_logger(__name__)

_app: FastAPI | None = None


async def _start_telegram() -> None:
    from orderflow.telegram.bot import get_bot, register_webhook
    from orderflow.telegram.webhook import get_webhook_url

    public_url = get_app_config().application.telegram.public_url
    if not public_url:
        logger.info("Telegram public_url not set, leaving webhook registration untouched")
        return
    await register_webhook(
        get_bot(), get_webhook_url(public_url), get_settings().telegram_webhook_secret
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config = get_app_config()
    setup_logging(level=config.logging.level)
    run_startup_checks(config)

    telegram_enabled = config.features.channel_telegram_enabled
    logger.info(
        "Order flow service starting",
        extra={
            "app_name": config.application.name,
            "env": config.application.environment,
            "telegram_enabled": telegram_enabled,
            "enforce_transitions": config.features.order_flow_enforce_transitions,
        },
    )
    if telegram_enabled:
        await _start_telegram()

    yield

    if telegram_enabled:
        from orderflow.telegram.bot import close_bot

        await close_bot()
    await dispose_engine()
    logger.info("Order flow service stopped")


def create_app() -> FastAPI:
    """Build the app: middleware, error envelopes, routers."""
    config = get_app_config()
    application = config.application
    docs = application.debug

    app = FastAPI(
        title=application.name,
        description=application.description,
        version=application.version,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    if application.cors.origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=application.cors.origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(api_v1_router, prefix=application.api_prefix)

    if config.features.channel_telegram_enabled:
        from orderflow.telegram.bot import get_bot, get_dispatcher
        from orderflow.telegram.webhook import get_webhook_router

        app.include_router(get_webhook_router(get_bot(), get_dispatcher()))
        logger.info("Telegram webhook mounted", extra={"path": application.telegram.webhook_path})

    return app


def get_app() -> FastAPI:
    """The process-wide app, created on first access so imports stay config-free."""
    global _app
    if _app is None:
        _app = create_app()
    return _app


def __getattr__(name: str) -> FastAPI:
    # Lets uvicorn resolve `orderflow.backend.main:app` lazily.
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
