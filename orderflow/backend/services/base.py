"""
Base Service.

Base class for all services. Services orchestrate repositories, keep the
business rules of order flows and their supporting entities, and turn
database failures into application errors.

Usage:
    from orderflow.backend.services.base import BaseService

    class SettingService(BaseService):
        def __init__(self, session: AsyncSession) -> None:
            super().__init__(session)
            self.repo = SettingRepository(session)

        async def create_setting(self, data: SettingCreate) -> Setting:
            self._ensure_absent(
                await self.repo.get_by_key(data.key),
                f"Setting '{data.key}' already exists",
                key=data.key,
            )
            return await self._execute_db_operation(
                "create_setting",
                self.repo.create(**data.model_dump()),
            )
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.core.exceptions import ConflictError, DatabaseError
from orderflow.backend.core.logging import get_logger

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Subclasses call super().__init__(session) and build their
    repositories on self.session.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        """Get the database session."""
        return self._session

    async def _execute_db_operation(
        self,
        operation: str,
        coro: Awaitable[T],
    ) -> T:
        """
        Await a repository call, converting SQLAlchemy errors.

        Args:
            operation: Name of the operation for logs and error messages
            coro: Awaitable to run

        Raises:
            ConflictError: For unique constraint violations
            DatabaseError: For any other database failure
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                service=self.__class__.__name__,
                operation=operation,
                error=str(e.orig),
            )
            error_str = str(e).lower()
            if "unique" in error_str or "duplicate" in error_str:
                raise ConflictError(
                    "Resource already exists",
                    details={"operation": operation},
                ) from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                service=self.__class__.__name__,
                operation=operation,
                error=str(e),
            )
            raise DatabaseError(f"Database operation failed: {operation}") from e

    @staticmethod
    def _ensure_absent(existing: Any, message: str, **details: Any) -> None:
        """Raise ConflictError when a lookup that must come back empty found something."""
        if existing is not None:
            raise ConflictError(message, details=details or None)

    def _log_operation(self, operation: str, **context: Any) -> None:
        self._logger.info(operation, service=self.__class__.__name__, **context)

    def _log_debug(self, message: str, **context: Any) -> None:
        self._logger.debug(message, service=self.__class__.__name__, **context)
