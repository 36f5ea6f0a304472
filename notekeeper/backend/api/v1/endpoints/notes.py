"""
Notes API Endpoints.

REST API endpoints for note management and the note lifecycle
(trash, restore, purge) of the signed-in user.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response

from notekeeper.backend.core.config import get_app_config
from notekeeper.backend.core.dependencies import CurrentUser, DbSession, RequestId
from notekeeper.backend.core.exceptions import NotFoundError
from notekeeper.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from notekeeper.backend.events.publishers import NoteEventPublisher
from notekeeper.backend.schemas.base import ApiResponse
from notekeeper.backend.schemas.note import (
    FOLDER_ALL,
    NoteCreate,
    NoteResponse,
    NoteSort,
    NoteUpdate,
)
from notekeeper.backend.services.export import export_filename, render_note_pdf
from notekeeper.backend.services.note import NoteService

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[NoteResponse],
    status_code=201,
    summary="Create a note",
    description="Create a new note. A blank title is stored as 'Untitled Note'.",
)
async def create_note(
    data: NoteCreate,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Create a new note."""
    service = NoteService(db)
    note = await service.create_note(user.id, data)
    await NoteEventPublisher().note_created(note, correlation_id=request_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.get(
    "",
    summary="List notes (paginated)",
    description="List the caller's notes for a folder, optionally filtered by a search query.",
)
async def list_notes(
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    folder: str = Query(
        default=FOLDER_ALL,
        max_length=100,
        description="All Notes, Pinned, Recently Deleted or a folder label",
    ),
    q: str | None = Query(
        default=None,
        max_length=200,
        description="Case-insensitive search over title and content",
    ),
    sort: NoteSort = Query(
        default=NoteSort.UPDATED_AT,
        description="Sort key within the pinned/active/trashed groups",
    ),
) -> dict[str, Any]:
    """List notes with full pagination support."""
    service = NoteService(db)

    notes, total = await service.list_notes_paginated(
        user.id,
        folder=folder,
        search=q,
        sort=sort,
        limit=pagination.limit,
        offset=pagination.offset,
    )

    return create_paginated_response(
        items=notes,
        item_schema=NoteResponse,
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
        request_id=request_id,
    )


@router.get(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Get a note",
    description="Get a single note by ID.",
)
async def get_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[NoteResponse]:
    """Get a note by ID."""
    service = NoteService(db)
    note = await service.get_note(user.id, note_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.patch(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note",
    description="Update an existing note. Only provided fields are updated.",
)
async def update_note(
    note_id: str,
    data: NoteUpdate,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Update a note."""
    service = NoteService(db)
    note = await service.update_note(user.id, note_id, data)
    fields = sorted(data.model_dump(exclude_unset=True))
    if fields:
        await NoteEventPublisher().note_updated(note, fields, correlation_id=request_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.delete(
    "/{note_id}",
    status_code=204,
    summary="Delete a note permanently",
    description="Permanently delete a note that is already in the trash.",
)
async def purge_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> None:
    """Purge a trashed note."""
    service = NoteService(db)
    await service.purge(user.id, note_id)
    await NoteEventPublisher().note_purged(note_id, user.id, correlation_id=request_id)


@router.post(
    "/{note_id}/trash",
    response_model=ApiResponse[NoteResponse],
    summary="Move a note to the trash",
    description="Soft delete. Trashing a note that is already trashed changes nothing.",
)
async def trash_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Soft delete a note."""
    service = NoteService(db)
    note = await service.soft_delete(user.id, note_id)
    await NoteEventPublisher().note_trashed(note, correlation_id=request_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.post(
    "/{note_id}/restore",
    response_model=ApiResponse[NoteResponse],
    summary="Restore a note",
    description="Bring a trashed note back.",
)
async def restore_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Restore a trashed note."""
    service = NoteService(db)
    note = await service.restore(user.id, note_id)
    await NoteEventPublisher().note_restored(note, correlation_id=request_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.get(
    "/{note_id}/export",
    summary="Export a note as PDF",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def export_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
) -> Response:
    """Download a note as a PDF document."""
    if not get_app_config().features.pdf_export_enabled:
        raise NotFoundError("PDF export is disabled")

    service = NoteService(db)
    note = await service.get_note(user.id, note_id)
    return Response(
        content=render_note_pdf(note),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(note)}"'},
    )
