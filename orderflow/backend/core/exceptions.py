"""
Application errors.

Each error carries a stable code for API clients and the HTTP status the
API answers with. Services raise these; exception_handlers.py renders
them into the error envelope.
"""


class ApplicationError(Exception):
    """Base for every error the API reports deliberately."""

    http_status = 500

    def __init__(
        self,
        message: str,
        code: str = "SYS_INTERNAL_ERROR",
        details: dict | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """No flow, shop, order or setting with that id, or no flow applies to a shop."""

    http_status = 404

    def __init__(self, message: str = "Resource not found", details: dict | None = None) -> None:
        super().__init__(message, code="RES_NOT_FOUND", details=details)


class ValidationError(ApplicationError):
    """Business-rule validation; `details` maps field names to messages."""

    http_status = 400

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        super().__init__(message, code="VAL_VALIDATION_ERROR", details=details)


class AuthenticationError(ApplicationError):
    http_status = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class AuthorizationError(ApplicationError):
    http_status = 403

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message, code="AUTHZ_FORBIDDEN")


class ConflictError(ApplicationError):
    """A second default flow, a second custom flow for a shop, a duplicate key."""

    http_status = 409

    def __init__(self, message: str = "Resource conflict", details: dict | None = None) -> None:
        super().__init__(message, code="RES_CONFLICT", details=details)


class TransitionNotAllowedError(ApplicationError):
    """The shop's flow has no such edge, or the caller's role may not take it."""

    http_status = 409

    def __init__(self, current_status: str, new_status: str, role: str) -> None:
        super().__init__(
            f"Status change from '{current_status}' to '{new_status}' "
            f"is not allowed for role '{role}'",
            code="FLOW_TRANSITION_FORBIDDEN",
            details={"current_status": current_status, "new_status": new_status, "role": role},
        )


class DatabaseError(ApplicationError):
    http_status = 503

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message, code="SYS_DATABASE_ERROR")
