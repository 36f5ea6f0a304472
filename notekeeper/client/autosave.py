"""
Autosave Controller.

Saves the open note a short while after the user stops typing.

    edit() -> pending --(debounce elapses)--> saving --> idle

An edit made while a write is in flight moves the status back to
pending; it returns to saving when the write of that edit starts.

Every edit restarts the countdown, so a burst of typing produces a
single write of the final draft. Drafts whose title and content are
both blank are never written. Writes for one note go through a
single-slot queue: when the countdown fires while a write is still in
flight, the latest draft is sent once after that write completes.

Usage:
    autosave = AutosaveController(store, note.id, NoteDraft.from_note(note))
    autosave.on_status_change(lambda status: print(status.value))
    autosave.edit(title="Groceries")
    ...
    await autosave.close()
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum

from notekeeper.backend.core.config import get_app_config
from notekeeper.backend.core.exceptions import ApplicationError
from notekeeper.backend.core.logging import get_logger, log_with_source
from notekeeper.backend.core.utils import utc_now
from notekeeper.backend.schemas.note import NoteResponse, NoteUpdate
from notekeeper.client.errors import WriteError
from notekeeper.client.store import NoteStoreClient

logger = get_logger(__name__)


class SaveStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"


@dataclass
class NoteDraft:
    """Editable fields of an open note."""

    title: str = ""
    content: str = ""
    tags: list[str] = field(default_factory=list)
    pinned: bool = False
    public: bool = False

    @classmethod
    def from_note(cls, note: NoteResponse) -> "NoteDraft":
        return cls(
            title=note.title,
            content=note.content,
            tags=list(note.tags),
            pinned=note.pinned,
            public=note.public,
        )

    def is_blank(self) -> bool:
        return not self.title.strip() and not self.content.strip()

    def to_update(self) -> NoteUpdate:
        return NoteUpdate(
            title=self.title,
            content=self.content,
            tags=list(self.tags),
            pinned=self.pinned,
            public=self.public,
        )


_DRAFT_FIELDS = {f.name for f in fields(NoteDraft)}


class AutosaveController:
    """Debounced, serialised saving of one note's draft."""

    def __init__(
        self,
        store: NoteStoreClient,
        note_id: str,
        draft: NoteDraft | None = None,
        debounce_ms: int | None = None,
    ) -> None:
        if debounce_ms is None:
            debounce_ms = get_app_config().notes.autosave.debounce_ms
        self.store = store
        self.note_id = note_id
        self.draft = draft or NoteDraft()
        self.delay = debounce_ms / 1000

        self.status = SaveStatus.IDLE
        self.last_saved_at: datetime | None = None
        self.last_error: ApplicationError | None = None

        self._listeners: list[Callable[[SaveStatus], None]] = []
        self._timer: asyncio.Task | None = None
        self._writer: asyncio.Task | None = None
        self._write_lock = asyncio.Lock()
        self._queued = False
        self._closed = False

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def on_status_change(self, callback: Callable[[SaveStatus], None]) -> Callable[[], None]:
        """Observe status transitions. Returns the unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_status(self, status: SaveStatus) -> None:
        if status == self.status:
            return
        self.status = status
        for callback in list(self._listeners):
            callback(status)

    def _settle(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._set_status(SaveStatus.PENDING)
        else:
            self._set_status(SaveStatus.IDLE)

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def edit(self, **changes) -> None:
        """
        Apply field changes to the draft and restart the countdown.

        Raises:
            TypeError: For a field the draft does not have
            RuntimeError: After close()
        """
        if self._closed:
            raise RuntimeError("Autosave controller is closed")
        unknown = set(changes) - _DRAFT_FIELDS
        if unknown:
            raise TypeError(f"Unknown draft fields: {sorted(unknown)}")

        self.draft = replace(self.draft, **changes)
        self._cancel_timer()

        if self.draft.is_blank():
            if self.status == SaveStatus.PENDING:
                self._set_status(SaveStatus.SAVING if self._write_lock.locked() else SaveStatus.IDLE)
            return

        # From any state, saving included
        self._timer = asyncio.get_running_loop().create_task(self._countdown())
        self._set_status(SaveStatus.PENDING)

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _countdown(self) -> None:
        await asyncio.sleep(self.delay)
        self._timer = None
        self._enqueue()

    def _enqueue(self) -> None:
        if self._writer is not None and not self._writer.done():
            self._queued = True
            return
        self._writer = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while True:
            self._queued = False
            try:
                await self._write()
            except ApplicationError:
                # Recorded on last_error. Not retried.
                pass
            if not self._queued:
                break
        self._settle()

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    async def _write(self) -> NoteResponse | None:
        async with self._write_lock:
            snapshot = replace(self.draft, tags=list(self.draft.tags))
            if snapshot.is_blank():
                return None

            self._set_status(SaveStatus.SAVING)
            try:
                note = await self.store.update(self.note_id, snapshot.to_update())
            except ApplicationError as e:
                self.last_error = e
                log_with_source(
                    logger,
                    "client",
                    "error",
                    "Autosave failed",
                    note_id=self.note_id,
                    code=e.code,
                    error=e.message,
                )
                raise

            self.last_saved_at = utc_now()
            self.last_error = None
            log_with_source(logger, "client", "debug", "Note autosaved", note_id=self.note_id)
            return note

    async def flush(self) -> NoteResponse | None:
        """
        Save the current draft now, skipping the countdown.

        Returns None for a blank draft, which is never written.

        Raises:
            WriteError: If the save fails
        """
        self._cancel_timer()
        if self._writer is not None and not self._writer.done():
            await self._writer

        try:
            return await self._write()
        except WriteError:
            raise
        except ApplicationError as e:
            raise WriteError(e.message, code=e.code) from e
        finally:
            self._settle()

    async def close(self) -> None:
        """Stop the countdown and wait for any write in flight."""
        self._closed = True
        self._cancel_timer()
        if self._writer is not None and not self._writer.done():
            await self._writer
        self._settle()
