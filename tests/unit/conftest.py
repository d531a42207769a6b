"""
Unit test fixtures: configuration built from the real schemas, fake secrets.

Nothing here touches a database, Telegram or the filesystem.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from orderflow.backend.core.config_schema import FeaturesSchema, OrderFlowSchema


@pytest.fixture
def mock_settings() -> SimpleNamespace:
    """
    Stand-in for Settings; patch it where the module under test looks it up:

        with patch("orderflow.telegram.webhook.get_settings", return_value=mock_settings):
            ...
    """
    return SimpleNamespace(
        db_password="test_pass",
        jwt_secret="test-secret-key-that-is-long-enough-for-testing",
        telegram_bot_token="123456:test-token",
        telegram_webhook_secret="webhook-secret-of-good-length",
    )


@pytest.fixture
def features() -> FeaturesSchema:
    """Every flag on except request logging, so notifications are sent."""
    return FeaturesSchema(
        auth_require_api_authentication=True,
        api_detailed_errors=True,
        api_request_logging=False,
        channel_telegram_enabled=True,
        order_flow_enforce_transitions=True,
        order_flow_notifications_enabled=True,
    )


@pytest.fixture
def order_flow_config() -> OrderFlowSchema:
    """The vocabulary shipped in order_flow.yaml."""
    return OrderFlowSchema(
        roles=["User", "Admin", "Operator", "ShopOwner", "Courier"],
        common_statuses=[
            "created",
            "confirmed",
            "packing",
            "packed",
            "courier_picked",
            "delivered",
            "paid",
            "rejected",
            "cancelled",
        ],
        status_buttons={
            "confirmed": "✅ Confirm",
            "packing": "📦 Start Packing",
            "packed": "📦 Finish Packing",
            "courier_picked": "🚚 Pick Up",
            "delivered": "✅ Delivered",
            "paid": "💵 Paid",
            "rejected": "❌ Reject",
        },
        user_role_map={
            "client": "User",
            "admin": "Admin",
            "operator": "Operator",
            "shop_owner": "ShopOwner",
            "courier": "Courier",
        },
        suggestion_limit=20,
    )


@pytest.fixture
def mock_app_config(features: FeaturesSchema, order_flow_config: OrderFlowSchema) -> MagicMock:
    """AppConfig stand-in whose features and order_flow sections are real schema objects."""
    config = MagicMock()
    config.features = features
    config.order_flow = order_flow_config
    return config
