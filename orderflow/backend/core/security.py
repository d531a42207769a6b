"""
Bearer tokens and the Telegram webhook secret.

The admin dashboard, the storefront and the admin CLI call the API with
HS256 access tokens whose `sub` is a marketplace user id and whose `role`
is one of the platform roles (client, admin, operator, shop_owner,
courier). Telegram proves itself with a shared secret header instead.
"""

import hmac
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from orderflow.backend.core.config import get_app_config, get_settings
from orderflow.backend.core.config_schema import JwtSchema
from orderflow.backend.core.exceptions import AuthenticationError
from orderflow.backend.core.logging import get_logger
from orderflow.backend.core.utils import utc_now

logger = get_logger(__name__)

TOKEN_TYPE = "access"


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role in get_app_config().security.admin_roles


def _signing() -> tuple[str, JwtSchema]:
    return get_settings().jwt_secret, get_app_config().security.jwt


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Sign `data` (normally `sub` and `role`) as an access token.

    Adds `exp`, `type` and `aud`; the lifetime defaults to
    security.jwt.access_token_expire_minutes. `data` itself is not modified.
    """
    secret, config = _signing()
    lifetime = expires_delta or timedelta(minutes=config.access_token_expire_minutes)
    claims = {**data, "exp": utc_now() + lifetime, "type": TOKEN_TYPE, "aud": config.audience}
    return jwt.encode(claims, secret, algorithm=config.algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """Verified claims; AuthenticationError for bad signatures, audiences or expiry."""
    secret, config = _signing()
    try:
        return jwt.decode(token, secret, algorithms=[config.algorithm], audience=config.audience)
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token") from e


def principal_from_token(token: str) -> Principal:
    claims = decode_token(token)
    user_id, role = claims.get("sub"), claims.get("role")
    if not (user_id and role):
        raise AuthenticationError("Token is missing subject or role")
    return Principal(user_id=str(user_id), role=str(role))


def verify_webhook_secret(received: str | None) -> bool:
    """Constant-time match against TELEGRAM_WEBHOOK_SECRET; False when either side is empty."""
    expected = get_settings().telegram_webhook_secret
    return bool(expected and received) and hmac.compare_digest(expected, received)
