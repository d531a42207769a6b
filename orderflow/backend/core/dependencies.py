"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.core.config import get_app_config
from orderflow.backend.core.database import get_db_session
from orderflow.backend.core.exceptions import AuthenticationError, AuthorizationError
from orderflow.backend.core.logging import get_logger
from orderflow.backend.core.security import Principal, principal_from_token

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

_bearer = HTTPBearer(auto_error=False)


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    import uuid

    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Principal:
    """
    Resolve the caller from the Authorization bearer token.

    When auth_require_api_authentication is disabled in features.yaml the
    caller is treated as a local admin (development only).
    """
    if not get_app_config().features.auth_require_api_authentication:
        return Principal(user_id="local-admin", role="admin")

    if credentials is None:
        raise AuthenticationError()

    return principal_from_token(credentials.credentials)


CurrentUser = Annotated[Principal, Depends(get_current_user)]


async def require_admin(user: CurrentUser) -> Principal:
    """Allow only admin callers (roles listed in security.yaml admin_roles)."""
    if not user.is_admin:
        logger.warning(
            "Admin action refused",
            extra={"user_id": user.user_id, "role": user.role},
        )
        raise AuthorizationError("Only admins can perform this action")
    return user


AdminUser = Annotated[Principal, Depends(require_admin)]
