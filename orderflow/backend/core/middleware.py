"""
Request context for the order flow API.

Each request gets a correlation id, a caller tag from X-Frontend-ID and a
response time header. The same values are bound into structlog's context
so every log line written while serving the request carries them.
"""

import uuid
from datetime import datetime

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from orderflow.backend.core.logging import VALID_SOURCES, get_logger
from orderflow.backend.core.utils import utc_now

logger = get_logger(__name__)

# Callers of the API: the admin panel, the shop storefront, the admin CLI and the bot.
KNOWN_FRONTENDS = {"admin", "storefront", "cli", "telegram", "api", "internal"}


def _frontend_of(request: Request) -> str:
    frontend = request.headers.get("X-Frontend-ID", "unknown").lower()
    return frontend if frontend in KNOWN_FRONTENDS else "unknown"


def _elapsed_ms(started: datetime) -> int:
    return int((utc_now() - started).total_seconds() * 1000)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Sets request.state.request_id, .frontend and .start_time.

    X-Request-ID is reused when the caller sends one, otherwise a UUID4 is
    generated; both it and X-Response-Time are echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        frontend = _frontend_of(request)
        started = utc_now()

        request.state.request_id = request_id
        request.state.frontend = frontend
        request.state.start_time = started

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            frontend=frontend,
            source=frontend if frontend in VALID_SOURCES else "web",
            method=request.method,
            path=request.url.path,
        )
        logger.debug(
            "Request started",
            extra={"client_host": request.client.host if request.client else None},
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            # The registered exception handlers render the envelope.
            logger.error(
                "Request raised",
                extra={"duration_ms": _elapsed_ms(started), "error_type": type(exc).__name__},
            )
            raise
        else:
            duration_ms = _elapsed_ms(started)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
            logger.debug(
                "Request finished",
                extra={"status_code": response.status_code, "duration_ms": duration_ms},
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()
