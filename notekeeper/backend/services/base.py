"""
Base Service.

Services own the business rules; repositories own the queries. A service
gets the request's session, builds its repositories in __init__, and
routes every write through _execute_db_operation so SQLAlchemy errors
surface as ApplicationErrors the API layer can render.

    class TaskService(BaseService):
        def __init__(self, session: AsyncSession) -> None:
            super().__init__(session)
            self.repo = TaskRepository(session)
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.backend.core.exceptions import (
    ConflictError,
    DatabaseError,
    ValidationError,
)
from notekeeper.backend.core.logging import get_logger

T = TypeVar("T")

_UNIQUE_MARKERS = ("unique", "duplicate")


class BaseService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def _execute_db_operation(
        self,
        operation: str,
        coro: Awaitable[T],
        conflict_code: str = "RES_ALREADY_EXISTS",
    ) -> T:
        """
        Await a repository call, translating database failures.

        A unique-constraint violation becomes ConflictError(conflict_code),
        which lets sign-up report AUTH_EMAIL_IN_USE when two requests race
        past the existence check. Any other SQLAlchemy failure becomes
        DatabaseError naming the operation. ApplicationErrors pass through.
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e)},
            )
            if any(marker in str(e).lower() for marker in _UNIQUE_MARKERS):
                raise ConflictError("Resource already exists", code=conflict_code) from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(f"Database operation failed: {operation}") from e

    def _validate_required(self, fields: dict[str, Any], field_names: list[str]) -> None:
        """Raise ValidationError listing every field that is None or blank."""
        missing = [
            name for name in field_names
            if fields.get(name) is None
            or (isinstance(fields[name], str) and not fields[name].strip())
        ]
        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _log(self, level: str, message: str, **context: Any) -> None:
        getattr(self._logger, level)(
            message,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_operation(self, operation: str, **context: Any) -> None:
        self._log("info", operation, **context)

    def _log_debug(self, message: str, **context: Any) -> None:
        self._log("debug", message, **context)
