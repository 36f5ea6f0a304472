"""
Trash/Lifecycle Manager.

Moves notes between active and trashed, and removes trashed notes for
good. Preconditions are checked against the last known state of the
note before any request is sent; the server checks them again.

    active --soft_delete--> trashed --restore--> active
    trashed --purge--> gone
"""

from dataclasses import dataclass, field

from notekeeper.backend.core.exceptions import ApplicationError
from notekeeper.backend.core.logging import get_logger, log_with_source
from notekeeper.backend.schemas.note import NoteResponse
from notekeeper.client.errors import NoteLifecycleError
from notekeeper.client.listing import NoteListViewModel
from notekeeper.client.store import NoteStoreClient

logger = get_logger(__name__)


@dataclass
class PurgeResult:
    """Outcome of emptying the trash from the client."""

    purged: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class TrashManager:
    """
    Lifecycle transitions for the signed-in user's notes.

    Args:
        store: Note store client
        known: View-model holding the last known state of each note
    """

    def __init__(self, store: NoteStoreClient, known: NoteListViewModel) -> None:
        self.store = store
        self.known = known

    def _last_known(self, note_id: str) -> NoteResponse | None:
        return self.known.get(note_id)

    async def soft_delete(self, note_id: str) -> NoteResponse:
        """Move a note to the trash."""
        note = self._last_known(note_id)
        if note is not None and note.deleted:
            return note
        return await self.store.soft_delete(note_id)

    async def restore(self, note_id: str) -> NoteResponse:
        """
        Bring a trashed note back.

        Raises:
            NoteLifecycleError: If the note is known to be active
        """
        note = self._last_known(note_id)
        if note is not None and not note.deleted:
            raise NoteLifecycleError("Note is not in the trash", code="NOTE_NOT_TRASHED")
        return await self.store.restore(note_id)

    async def purge(self, note_id: str) -> None:
        """
        Delete a trashed note permanently.

        Raises:
            NoteLifecycleError: If the note is known to be active
        """
        note = self._last_known(note_id)
        if note is not None and not note.deleted:
            raise NoteLifecycleError(
                "Only notes in the trash can be deleted permanently",
                code="NOTE_NOT_TRASHED",
            )
        await self.store.purge(note_id)

    async def purge_all(self) -> PurgeResult:
        """
        Purge every trashed note one by one.

        A failure is logged and recorded; the remaining notes are still
        attempted.
        """
        trashed = [note.id for note in self.known.notes if note.deleted]
        result = PurgeResult()

        for note_id in sorted(trashed):
            try:
                await self.store.purge(note_id)
            except ApplicationError as e:
                log_with_source(
                    logger,
                    "client",
                    "warning",
                    "Failed to purge note",
                    note_id=note_id,
                    code=e.code,
                    error=e.message,
                )
                result.failed.append(note_id)
            else:
                result.purged.append(note_id)

        log_with_source(
            logger,
            "client",
            "info",
            "Trash emptied",
            purged=len(result.purged),
            failed=len(result.failed),
        )
        return result
