"""
Note List View-Model.

Derives the visible note sequence from the notes known to the client,
the selected folder, the search query and the sort key. The rules are
the same ones the API applies in SQL (see repositories/note.py). A
locally recomputed list matches a fetched one for ASCII text only:
SQLite's lower() and LIKE fold ASCII letters alone, and PostgreSQL
orders titles by its collation rather than by code point.

    visible = sort(filter(notes, folder, query), key)
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Protocol

from notekeeper.backend.schemas.note import (
    FOLDER_ALL,
    FOLDER_PINNED,
    FOLDER_TRASH,
    NoteSort,
)
from notekeeper.client.feed import FeedKind, NoteFeed, NoteFeedEvent


class NoteLike(Protocol):
    id: str
    title: str
    content: str
    pinned: bool
    deleted: bool
    folder: str
    created_at: datetime
    updated_at: datetime


def matches_folder(note: NoteLike, folder: str) -> bool:
    """Whether a note belongs in the selected sidebar folder."""
    if folder == FOLDER_ALL:
        return not note.deleted
    if folder == FOLDER_PINNED:
        return note.pinned and not note.deleted
    if folder == FOLDER_TRASH:
        return note.deleted
    return note.folder == folder and not note.deleted


def matches_search(note: NoteLike, query: str | None) -> bool:
    """Case-insensitive substring match over title and content."""
    if query is None or not query.strip():
        return True
    needle = query.strip().lower()
    return needle in (note.title or "").lower() or needle in (note.content or "").lower()


def _group(note: NoteLike) -> int:
    if note.deleted:
        return 2
    return 0 if note.pinned else 1


def sort_notes(notes: Iterable[NoteLike], sort: NoteSort = NoteSort.UPDATED_AT) -> list:
    """
    Order notes for display.

    Pinned active notes first, then other active notes, then trashed ones.
    Inside a group by the sort key; ties broken by id ascending.
    """
    # Stable sorts applied from the least significant key up.
    ordered = sorted(notes, key=lambda n: n.id)
    if sort == NoteSort.TITLE:
        ordered.sort(key=lambda n: (n.title or "").lower())
    elif sort == NoteSort.CREATED_AT:
        ordered.sort(key=lambda n: n.created_at, reverse=True)
    else:
        ordered.sort(key=lambda n: n.updated_at, reverse=True)
    ordered.sort(key=_group)
    return ordered


def visible_notes(
    notes: Iterable[NoteLike],
    folder: str = FOLDER_ALL,
    query: str | None = None,
    sort: NoteSort = NoteSort.UPDATED_AT,
) -> list:
    """The notes a list shows for a folder, query and sort key."""
    selected = [n for n in notes if matches_folder(n, folder) and matches_search(n, query)]
    return sort_notes(selected, sort)


def folder_counts(notes: Iterable[NoteLike]) -> dict[str, int]:
    """Note count per sidebar entry, including custom folder labels."""
    notes = list(notes)
    counts = {
        FOLDER_ALL: sum(1 for n in notes if matches_folder(n, FOLDER_ALL)),
        FOLDER_PINNED: sum(1 for n in notes if matches_folder(n, FOLDER_PINNED)),
        FOLDER_TRASH: sum(1 for n in notes if matches_folder(n, FOLDER_TRASH)),
    }
    labels: dict[str, int] = {}
    for note in notes:
        if not note.deleted and note.folder not in counts:
            labels[note.folder] = labels.get(note.folder, 0) + 1
    counts.update(sorted(labels.items()))
    return counts


class NoteListViewModel:
    """
    Keeps the client's notes by id and recomputes the visible list
    whenever the notes, folder, query or sort key change.

    Usage:
        view = NoteListViewModel()
        view.attach(store.feed)
        view.set_folder("Pinned")
        view.visible  # -> list of notes
    """

    def __init__(
        self,
        folder: str = FOLDER_ALL,
        query: str = "",
        sort: NoteSort = NoteSort.UPDATED_AT,
    ) -> None:
        self._notes: dict[str, NoteLike] = {}
        self.folder = folder
        self.query = query
        self.sort = sort
        self.visible: list = []
        self._listeners: list[Callable[[list], None]] = []
        self._detach: Callable[[], None] | None = None

    def attach(self, feed: NoteFeed) -> None:
        """Follow a change feed. Replaces any previous one."""
        self.detach()
        self._detach = feed.subscribe(self.apply)

    def detach(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None

    def on_change(self, callback: Callable[[list], None]) -> None:
        self._listeners.append(callback)

    def apply(self, event: NoteFeedEvent) -> None:
        """Fold a feed event into the known notes."""
        if event.kind == FeedKind.SNAPSHOT:
            self._notes = {note.id: note for note in event.notes}
        elif event.kind == FeedKind.UPSERT:
            for note in event.notes:
                self._notes[note.id] = note
        elif event.kind == FeedKind.REMOVE and event.note_id is not None:
            self._notes.pop(event.note_id, None)
        self._recompute()

    def set_folder(self, folder: str) -> None:
        self.folder = folder
        self._recompute()

    def set_query(self, query: str) -> None:
        self.query = query
        self._recompute()

    def set_sort(self, sort: NoteSort) -> None:
        self.sort = NoteSort(sort)
        self._recompute()

    @property
    def notes(self) -> list:
        return list(self._notes.values())

    def get(self, note_id: str) -> NoteLike | None:
        return self._notes.get(note_id)

    @property
    def counts(self) -> dict[str, int]:
        return folder_counts(self._notes.values())

    def _recompute(self) -> None:
        self.visible = visible_notes(self._notes.values(), self.folder, self.query, self.sort)
        for listener in list(self._listeners):
            listener(self.visible)
