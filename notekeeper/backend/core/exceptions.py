"""
Application Exceptions.

Each class fixes an HTTP status (see exception_handlers) and a default
code. Raise sites pass a more specific code when clients need to tell
failures apart, e.g. ConflictError(..., code="NOTE_NOT_TRASHED") or
ValidationError(..., code="AUTH_WEAK_PASSWORD").
"""


class ApplicationError(Exception):
    default_message = "An unexpected error occurred"
    default_code = "SYS_INTERNAL_ERROR"

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    default_message = "Resource not found"
    default_code = "RES_NOT_FOUND"


class ValidationError(ApplicationError):
    """details maps field names to what is wrong with them."""

    default_message = "Validation failed"
    default_code = "VAL_VALIDATION_ERROR"

    def __init__(
        self,
        message: str | None = None,
        details: dict | None = None,
        code: str | None = None,
    ) -> None:
        self.details = details or {}
        super().__init__(message, code=code)


class AuthenticationError(ApplicationError):
    default_message = "Authentication required"
    default_code = "AUTH_UNAUTHORIZED"


class AuthorizationError(ApplicationError):
    default_message = "Permission denied"
    default_code = "AUTHZ_FORBIDDEN"


class ConflictError(ApplicationError):
    """The request is valid but the resource's current state forbids it."""

    default_message = "Resource conflict"
    default_code = "RES_CONFLICT"


class ExternalServiceError(ApplicationError):
    default_message = "External service error"
    default_code = "SYS_EXTERNAL_SERVICE_ERROR"


class DatabaseError(ApplicationError):
    default_message = "Database error"
    default_code = "SYS_DATABASE_ERROR"
