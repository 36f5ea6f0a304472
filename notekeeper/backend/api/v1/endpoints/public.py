"""
Public Share Endpoints.

Read-only view of a note through its share link. No sign-in required.
"""

from fastapi import APIRouter

from notekeeper.backend.core.dependencies import DbSession
from notekeeper.backend.core.exceptions import AuthorizationError, NotFoundError
from notekeeper.backend.core.logging import get_logger
from notekeeper.backend.repositories.note import NoteRepository
from notekeeper.backend.schemas.base import ApiResponse
from notekeeper.backend.schemas.note import PublicNoteResponse

router = APIRouter()
logger = get_logger(__name__)

UNAVAILABLE_MESSAGE = "This note is private or unavailable."


@router.get(
    "/notes/{note_id}",
    response_model=ApiResponse[PublicNoteResponse],
    summary="View a shared note",
)
async def get_public_note(
    note_id: str,
    db: DbSession,
) -> ApiResponse[PublicNoteResponse]:
    """
    Get a note through its public link.

    Raises:
        NotFoundError: If the note does not exist
        AuthorizationError: If the note is private or in the trash
    """
    note = await NoteRepository(db).get_public(note_id)
    if note is None:
        raise NotFoundError("Note not found")
    if not note.public or note.deleted:
        logger.info("Public view refused", extra={"note_id": note_id})
        raise AuthorizationError(UNAVAILABLE_MESSAGE, code="NOTE_UNAVAILABLE")
    return ApiResponse(data=PublicNoteResponse.model_validate(note))
