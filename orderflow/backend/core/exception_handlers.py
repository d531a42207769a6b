"""
Error envelopes for the order flow API.

Every failure leaves the API as

    {"success": false, "data": null,
     "error": {"code": ..., "message": ..., "details": ...},
     "metadata": {"timestamp": ..., "request_id": ...}}

ApplicationError subclasses choose their own status; request validation
is 422 VAL_REQUEST_INVALID; anything else is 500 SYS_INTERNAL_ERROR.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from orderflow.backend.core.exceptions import ApplicationError
from orderflow.backend.core.logging import get_logger
from orderflow.backend.schemas.base import ErrorDetail, ErrorResponse, ResponseMetadata

logger = get_logger(__name__)


def _get_request_id(request: Request) -> str | None:
    """Id set by RequestContextMiddleware, else whatever the caller sent."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("x-request-id")


def _detailed_errors_enabled() -> bool:
    from orderflow.backend.core.config import get_app_config

    try:
        return get_app_config().features.api_detailed_errors
    except (FileNotFoundError, RuntimeError, ValueError):
        return False


def _envelope(request: Request, status_code: int, error: ErrorDetail) -> JSONResponse:
    body = ErrorResponse(error=error, metadata=ResponseMetadata(request_id=_get_request_id(request)))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _request_fields(request: Request) -> dict:
    return {
        "path": request.url.path,
        "method": request.method,
        "request_id": _get_request_id(request),
    }


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    status_code = exc.http_status
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Server error" if status_code >= 500 else "Client error",
        extra={
            "code": exc.code,
            "message": exc.message,
            "status": status_code,
            **_request_fields(request),
        },
    )
    return _envelope(
        request,
        status_code,
        ErrorDetail(code=exc.code, message=exc.message, details=exc.details or None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """One entry per failing field; `field` is the dotted loc, e.g. body.steps.0.status."""
    validation_errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Validation error"),
            "type": err.get("type", "unknown"),
        }
        for err in exc.errors()
    ]
    logger.warning(
        "Request validation failed",
        extra={"error_count": len(validation_errors), **_request_fields(request)},
    )
    return _envelope(
        request,
        422,
        ErrorDetail(
            code="VAL_REQUEST_INVALID",
            message="Request validation failed",
            details={"validation_errors": validation_errors},
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Generic 500; the exception type is exposed only with api_detailed_errors."""
    logger.exception(
        "Unhandled exception",
        extra={"exception_type": type(exc).__name__, **_request_fields(request)},
    )
    details = {"exception_type": type(exc).__name__} if _detailed_errors_enabled() else None
    return _envelope(
        request,
        500,
        ErrorDetail(code="SYS_INTERNAL_ERROR", message="An unexpected error occurred", details=details),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
