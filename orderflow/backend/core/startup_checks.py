"""
Startup Security Validation.

Checks security invariants before the application accepts traffic. If any
check fails, the application refuses to start with a clear error message.

Called during FastAPI lifespan initialization.
"""

from orderflow.backend.core.config import AppConfig, Settings, get_app_config, get_settings
from orderflow.backend.core.logging import get_logger

logger = get_logger(__name__)


class StartupSecurityError(RuntimeError):
    """Raised when a startup security check fails."""


def run_startup_checks(
    app_config: AppConfig | None = None,
    settings: Settings | None = None,
) -> None:
    """
    Validate all security invariants at startup.

    Raises:
        StartupSecurityError: If any check fails
    """
    app_config = app_config or get_app_config()
    settings = settings or get_settings()
    environment = app_config.application.environment

    errors: list[str] = []

    _check_secret_strength(app_config, settings, errors)
    _check_telegram_secrets(app_config, settings, errors)
    if environment == "production":
        _check_production_safety(app_config, errors)

    if errors:
        for error in errors:
            logger.error("Startup security check failed", extra={"check": error})
        raise StartupSecurityError(
            f"Startup blocked: {len(errors)} security check(s) failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    logger.info("Startup security checks passed", extra={"environment": environment})


def _check_secret_strength(app_config: AppConfig, settings: Settings, errors: list[str]) -> None:
    minimum = app_config.security.secrets_validation.jwt_secret_min_length
    if len(settings.jwt_secret) < minimum:
        errors.append(f"JWT_SECRET is {len(settings.jwt_secret)} chars, minimum is {minimum}")


def _check_telegram_secrets(app_config: AppConfig, settings: Settings, errors: list[str]) -> None:
    """Enabled Telegram forwarding needs a bot token and a webhook secret."""
    if not app_config.features.channel_telegram_enabled:
        return

    if not settings.telegram_bot_token:
        errors.append("channel_telegram_enabled is true but TELEGRAM_BOT_TOKEN is empty")

    minimum = app_config.security.secrets_validation.webhook_secret_min_length
    if len(settings.telegram_webhook_secret) < minimum:
        errors.append(
            f"TELEGRAM_WEBHOOK_SECRET is {len(settings.telegram_webhook_secret)} chars, "
            f"minimum is {minimum}"
        )


def _check_production_safety(app_config: AppConfig, errors: list[str]) -> None:
    if app_config.application.debug:
        errors.append("debug is true in production environment")

    if app_config.features.api_detailed_errors:
        errors.append("api_detailed_errors is true in production environment")

    if not app_config.features.auth_require_api_authentication:
        errors.append("auth_require_api_authentication is false in production environment")

    localhost_origins = [o for o in app_config.application.cors.origins if "localhost" in o]
    if localhost_origins:
        errors.append(f"CORS origins contain localhost in production: {localhost_origins}")
