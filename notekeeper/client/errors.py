"""
Client Errors.

Errors raised by the client core. They extend the backend's
ApplicationError hierarchy so that code and message travel together.
None of them is fatal: callers show the message and carry on.
"""

from notekeeper.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
)


class AuthError(AuthenticationError):
    """Sign-in, sign-up or session failure with a user-facing message."""


class NoteNotFoundError(NotFoundError):
    """The note does not exist or belongs to someone else."""

    def __init__(self, note_id: str) -> None:
        self.note_id = note_id
        super().__init__(f"Note {note_id} not found", code="NOTE_NOT_FOUND")


class NoteUnavailableError(AuthorizationError):
    """A shared note that is private or in the trash."""

    def __init__(self, message: str = "This note is private or unavailable.") -> None:
        super().__init__(message, code="NOTE_UNAVAILABLE")


class NoteLifecycleError(ConflictError):
    """A lifecycle transition the note's current state does not allow."""

    def __init__(self, message: str, code: str = "NOTE_INVALID_TRANSITION") -> None:
        super().__init__(message, code=code)


class WriteError(ApplicationError):
    """A write to the note store did not go through."""

    def __init__(self, message: str = "Failed to save changes", code: str = "CLIENT_WRITE_FAILED") -> None:
        super().__init__(message, code=code)
