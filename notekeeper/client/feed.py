"""
Note Feed.

Observer channel between the note store client and whatever shows notes.
A subscriber receives a full snapshot after each refresh and incremental
upserts/removals after each successful mutation.

Usage:
    feed = NoteFeed()
    unsubscribe = feed.subscribe(view_model.apply)
    feed.upsert(note)
    unsubscribe()
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from notekeeper.backend.core.logging import get_logger, log_with_source
from notekeeper.backend.schemas.note import NoteResponse

logger = get_logger(__name__)


class FeedKind(str, Enum):
    SNAPSHOT = "snapshot"
    UPSERT = "upsert"
    REMOVE = "remove"


@dataclass(frozen=True)
class NoteFeedEvent:
    """One change delivered to subscribers."""

    kind: FeedKind
    notes: tuple[NoteResponse, ...] = field(default_factory=tuple)
    note_id: str | None = None


FeedCallback = Callable[[NoteFeedEvent], None]


class NoteFeed:
    """Fan-out of note changes to subscribers, in subscription order."""

    def __init__(self) -> None:
        self._subscribers: list[FeedCallback] = []

    def subscribe(self, callback: FeedCallback) -> Callable[[], None]:
        """Register a callback. Returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: NoteFeedEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                log_with_source(
                    logger,
                    "client",
                    "error",
                    "Feed subscriber failed",
                    kind=event.kind.value,
                    error=str(e),
                )

    def snapshot(self, notes: list[NoteResponse]) -> None:
        self.publish(NoteFeedEvent(FeedKind.SNAPSHOT, notes=tuple(notes)))

    def upsert(self, note: NoteResponse) -> None:
        self.publish(NoteFeedEvent(FeedKind.UPSERT, notes=(note,), note_id=note.id))

    def remove(self, note_id: str) -> None:
        self.publish(NoteFeedEvent(FeedKind.REMOVE, note_id=note_id))
