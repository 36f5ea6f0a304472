"""
Trash API Endpoints.

The "Recently Deleted" view and emptying it.
"""

from fastapi import APIRouter

from notekeeper.backend.core.dependencies import CurrentUser, DbSession, RequestId
from notekeeper.backend.events.publishers import NoteEventPublisher
from notekeeper.backend.schemas.base import ApiResponse
from notekeeper.backend.schemas.note import NoteResponse, PurgeReport
from notekeeper.backend.services.note import NoteService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[NoteResponse]],
    summary="List trashed notes",
)
async def list_trash(
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[list[NoteResponse]]:
    """Trashed notes, oldest deletion first."""
    service = NoteService(db)
    notes = await service.list_trash(user.id)
    return ApiResponse(data=[NoteResponse.model_validate(note) for note in notes])


@router.delete(
    "",
    response_model=ApiResponse[PurgeReport],
    summary="Empty the trash",
    description="Permanently delete every trashed note. Failures are reported, not raised.",
)
async def empty_trash(
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[PurgeReport]:
    """Purge all trashed notes."""
    service = NoteService(db)
    report = await service.purge_all(user.id)

    publisher = NoteEventPublisher()
    for note_id in report.purged:
        await publisher.note_purged(note_id, user.id, correlation_id=request_id)

    return ApiResponse(data=report)
