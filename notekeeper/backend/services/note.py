"""
Note Service.

Business logic layer for notes. Orchestrates repositories,
handles validation, and implements business rules.

Every operation is scoped to the owner. A note that belongs to another
user is indistinguishable from a missing one.

Lifecycle:
    active --soft_delete--> trashed --restore--> active
    trashed --purge--> (row removed)
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.backend.core.exceptions import ApplicationError, ConflictError
from notekeeper.backend.core.utils import utc_now
from notekeeper.backend.models.note import DEFAULT_FOLDER, UNTITLED_TITLE, Note
from notekeeper.backend.repositories.note import NoteRepository
from notekeeper.backend.schemas.note import (
    FOLDER_ALL,
    NoteCreate,
    NoteSort,
    NoteUpdate,
    PurgeReport,
)
from notekeeper.backend.services.base import BaseService


def _title_or_default(title: str | None) -> str:
    if title is None or not title.strip():
        return UNTITLED_TITLE
    return title


class NoteService(BaseService):
    """
    Service for note business logic.

    Handles note creation, updates, retrieval and the trash lifecycle
    with proper validation and error handling.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = NoteRepository(session)

    @staticmethod
    def _touch(note: Note) -> dict:
        """Fresh updated_at that never moves behind the stored one."""
        now = utc_now()
        if note.updated_at is not None and note.updated_at > now:
            now = note.updated_at
        return {"updated_at": now}

    async def create_note(self, owner_id: str, data: NoteCreate) -> Note:
        """
        Create a new note.

        Args:
            owner_id: Signed-in user ID
            data: Note creation data

        Returns:
            Created note
        """
        title = _title_or_default(data.title)
        self._log_operation("Creating note", owner_id=owner_id, title=title)

        note = await self._execute_db_operation(
            "create_note",
            self.repo.create(
                owner_id=owner_id,
                title=title,
                content=data.content,
                tags=data.tags,
                pinned=data.pinned,
                public=data.public,
                folder=data.folder or DEFAULT_FOLDER,
                deleted=False,
            ),
        )

        self._log_debug("Note created", note_id=note.id)
        return note

    async def get_note(self, owner_id: str, note_id: str) -> Note:
        """
        Get a note by ID.

        Raises:
            NotFoundError: If note not found or owned by someone else
        """
        return await self.repo.get_owned(owner_id, note_id)

    async def list_notes_paginated(
        self,
        owner_id: str,
        folder: str = FOLDER_ALL,
        search: str | None = None,
        sort: NoteSort = NoteSort.UPDATED_AT,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Note], int]:
        """
        List notes with total count for pagination.

        Args:
            owner_id: Signed-in user ID
            folder: Folder selection
            search: Optional case-insensitive search query
            sort: Sort key within each display group
            limit: Maximum number of notes
            offset: Number to skip for pagination

        Returns:
            Tuple of (notes list, total count)
        """
        notes = await self.repo.list_for_owner(
            owner_id,
            folder=folder,
            search=search,
            sort=sort,
            limit=limit,
            offset=offset,
        )
        total = await self.repo.count_for_owner(owner_id, folder=folder, search=search)
        return notes, total

    async def update_note(self, owner_id: str, note_id: str, data: NoteUpdate) -> Note:
        """
        Update an existing note.

        Args:
            owner_id: Signed-in user ID
            note_id: Note ID to update
            data: Update data (only fields that were set are written)

        Returns:
            Updated note

        Raises:
            NotFoundError: If note not found
        """
        note = await self.repo.get_owned(owner_id, note_id)
        update_data = data.model_dump(exclude_unset=True)

        if not update_data:
            return note

        if "title" in update_data:
            update_data["title"] = _title_or_default(update_data["title"])
        if "folder" in update_data and not update_data["folder"]:
            update_data["folder"] = DEFAULT_FOLDER
        for flag in ("content", "tags", "pinned", "public"):
            if flag in update_data and update_data[flag] is None:
                del update_data[flag]

        self._log_operation(
            "Updating note",
            note_id=note_id,
            fields=list(update_data.keys()),
        )

        return await self._execute_db_operation(
            "update_note",
            self.repo.update_instance(note, **update_data, **self._touch(note)),
        )

    async def soft_delete(self, owner_id: str, note_id: str) -> Note:
        """
        Move a note to the trash.

        Trashing a note that is already in the trash returns it unchanged.
        """
        note = await self.repo.get_owned(owner_id, note_id)
        if note.deleted:
            self._log_debug("Note already trashed", note_id=note_id)
            return note

        self._log_operation("Trashing note", note_id=note_id)
        touch = self._touch(note)
        return await self._execute_db_operation(
            "soft_delete",
            self.repo.update_instance(
                note,
                deleted=True,
                deleted_at=touch["updated_at"],
                **touch,
            ),
        )

    async def restore(self, owner_id: str, note_id: str) -> Note:
        """
        Bring a trashed note back.

        Raises:
            NotFoundError: If note not found
            ConflictError: If the note is not in the trash
        """
        note = await self.repo.get_owned(owner_id, note_id)
        if not note.deleted:
            raise ConflictError("Note is not in the trash", code="NOTE_NOT_TRASHED")

        self._log_operation("Restoring note", note_id=note_id)
        return await self._execute_db_operation(
            "restore",
            self.repo.update_instance(
                note,
                deleted=False,
                deleted_at=None,
                **self._touch(note),
            ),
        )

    async def purge(self, owner_id: str, note_id: str) -> None:
        """
        Permanently remove a trashed note.

        Raises:
            NotFoundError: If note not found
            ConflictError: If the note is still active
        """
        note = await self.repo.get_owned(owner_id, note_id)
        if not note.deleted:
            raise ConflictError(
                "Only notes in the trash can be deleted permanently",
                code="NOTE_NOT_TRASHED",
            )

        self._log_operation("Purging note", note_id=note_id)
        await self._execute_db_operation(
            "purge",
            self.repo.delete_instance(note),
        )

    async def list_trash(self, owner_id: str) -> list[Note]:
        """Trashed notes of an owner, oldest deletion first."""
        return await self.repo.get_trashed(owner_id)

    async def purge_all(self, owner_id: str) -> PurgeReport:
        """
        Empty the trash.

        Each note is removed inside its own savepoint, so one failure
        rolls back only that note and the loop carries on.
        """
        trashed = await self.repo.get_trashed(owner_id)
        self._log_operation("Emptying trash", owner_id=owner_id, count=len(trashed))

        report = PurgeReport()
        for note in trashed:
            note_id = note.id
            try:
                async with self.session.begin_nested():
                    await self.repo.delete_instance(note)
            except (ApplicationError, SQLAlchemyError) as e:
                self._logger.warning(
                    "Failed to purge note",
                    extra={"note_id": note_id, "error": str(e)},
                )
                report.failed.append(note_id)
            else:
                report.purged.append(note_id)

        return report
