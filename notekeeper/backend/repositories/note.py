"""
Note Repository.

Data access layer for notes. Handles all database operations
for the Note model, always scoped to the owning user.
"""

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from notekeeper.backend.models.note import Note
from notekeeper.backend.repositories.base import OwnedRepository
from notekeeper.backend.schemas.note import (
    FOLDER_ALL,
    FOLDER_PINNED,
    FOLDER_TRASH,
    NoteSort,
)


def _escape_like(query: str) -> str:
    return query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def folder_clause(folder: str) -> ColumnElement[bool]:
    """SQL predicate for a sidebar folder selection."""
    if folder == FOLDER_ALL:
        return Note.deleted.is_(False)
    if folder == FOLDER_PINNED:
        return and_(Note.pinned.is_(True), Note.deleted.is_(False))
    if folder == FOLDER_TRASH:
        return Note.deleted.is_(True)
    return and_(Note.folder == folder, Note.deleted.is_(False))


def search_clause(query: str) -> ColumnElement[bool]:
    """Case-insensitive substring match over title and content."""
    pattern = f"%{_escape_like(query)}%"
    return or_(
        Note.title.ilike(pattern, escape="\\"),
        Note.content.ilike(pattern, escape="\\"),
    )


def display_order(sort: NoteSort) -> list:
    """
    ORDER BY terms for the note list.

    Pinned active notes first, then other active notes, then trashed notes.
    Within a group by the selected key, ties broken by id.
    Title order folds case with the database's lower(), which on SQLite
    only touches ASCII letters.
    """
    group = case(
        (and_(Note.pinned.is_(True), Note.deleted.is_(False)), 0),
        (Note.deleted.is_(False), 1),
        else_=2,
    )
    if sort == NoteSort.TITLE:
        key = func.lower(Note.title).asc()
    elif sort == NoteSort.CREATED_AT:
        key = Note.created_at.desc()
    else:
        key = Note.updated_at.desc()
    return [group, key, Note.id.asc()]


class NoteRepository(OwnedRepository[Note]):
    """
    Repository for Note model.

    Inherits standard CRUD operations from BaseRepository
    and adds owner-scoped listing queries.
    """

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    def _filtered(self, owner_id: str, folder: str, search: str | None):
        stmt = select(Note).where(Note.owner_id == owner_id).where(folder_clause(folder))
        if search and search.strip():
            stmt = stmt.where(search_clause(search.strip()))
        return stmt

    async def list_for_owner(
        self,
        owner_id: str,
        folder: str = FOLDER_ALL,
        search: str | None = None,
        sort: NoteSort = NoteSort.UPDATED_AT,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Note]:
        """
        List an owner's notes for a folder, search query and sort key.

        Args:
            owner_id: Signed-in user ID
            folder: Folder selection (All Notes, Pinned, Recently Deleted or a label)
            search: Optional search query
            sort: Sort key within each display group
            limit: Maximum number of notes to return
            offset: Number of notes to skip

        Returns:
            List of notes in display order
        """
        result = await self.session.execute(
            self._filtered(owner_id, folder, search)
            .order_by(*display_order(sort))
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def count_for_owner(
        self,
        owner_id: str,
        folder: str = FOLDER_ALL,
        search: str | None = None,
    ) -> int:
        """Count an owner's notes matching a folder and search query."""
        subquery = self._filtered(owner_id, folder, search).subquery()
        result = await self.session.execute(
            select(func.count()).select_from(subquery)
        )
        return result.scalar_one()

    async def get_trashed(self, owner_id: str) -> list[Note]:
        """Get every trashed note of an owner, oldest deletion first."""
        result = await self.session.execute(
            select(Note)
            .where(Note.owner_id == owner_id)
            .where(Note.deleted.is_(True))
            .order_by(Note.deleted_at.asc(), Note.id.asc())
        )
        return list(result.scalars().all())

    async def get_public(self, id: str) -> Note | None:
        """Get a note by ID regardless of owner, for the public share view."""
        return await self.get_by_id_or_none(id)
