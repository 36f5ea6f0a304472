"""
Event Publishers.

Note lifecycle publishers. Each method wraps the broker's publish()
with the right stream name and event schema.

Publishers check the events_publish_enabled feature flag before publishing.
When disabled, events are silently skipped (no error, no log noise).

Usage:
    from notekeeper.backend.events.publishers import NoteEventPublisher

    publisher = NoteEventPublisher()
    await publisher.note_created(note, correlation_id=request_id)
"""

from notekeeper.backend.core.config import get_app_config
from notekeeper.backend.core.logging import get_logger
from notekeeper.backend.events.schemas import (
    EventEnvelope,
    NoteCreated,
    NotePurged,
    NoteRestored,
    NoteTrashed,
    NoteUpdated,
)
from notekeeper.backend.models.note import Note

logger = get_logger(__name__)

SOURCE = "note-service"


class NoteEventPublisher:
    """Publishes note lifecycle events to Redis Streams."""

    def __init__(self) -> None:
        self._config = get_app_config()

    def stream_name(self, action: str) -> str:
        return f"{self._config.events.streams.prefix}:note-{action}"

    async def note_created(self, note: Note, correlation_id: str) -> None:
        """Publish a notes.note.created event."""
        await self._publish(
            self.stream_name("created"),
            NoteCreated(
                source=SOURCE,
                correlation_id=correlation_id,
                payload={"note_id": note.id, "owner_id": note.owner_id, "title": note.title},
            ),
        )

    async def note_updated(self, note: Note, fields: list[str], correlation_id: str) -> None:
        """Publish a notes.note.updated event."""
        await self._publish(
            self.stream_name("updated"),
            NoteUpdated(
                source=SOURCE,
                correlation_id=correlation_id,
                payload={"note_id": note.id, "owner_id": note.owner_id, "fields_updated": fields},
            ),
        )

    async def note_trashed(self, note: Note, correlation_id: str) -> None:
        """Publish a notes.note.trashed event."""
        await self._publish(
            self.stream_name("trashed"),
            NoteTrashed(
                source=SOURCE,
                correlation_id=correlation_id,
                payload={"note_id": note.id, "owner_id": note.owner_id},
            ),
        )

    async def note_restored(self, note: Note, correlation_id: str) -> None:
        """Publish a notes.note.restored event."""
        await self._publish(
            self.stream_name("restored"),
            NoteRestored(
                source=SOURCE,
                correlation_id=correlation_id,
                payload={"note_id": note.id, "owner_id": note.owner_id},
            ),
        )

    async def note_purged(self, note_id: str, owner_id: str, correlation_id: str) -> None:
        """Publish a notes.note.purged event."""
        await self._publish(
            self.stream_name("purged"),
            NotePurged(
                source=SOURCE,
                correlation_id=correlation_id,
                payload={"note_id": note_id, "owner_id": owner_id},
            ),
        )

    async def _publish(self, stream: str, event: EventEnvelope) -> None:
        """Publish an event if the feature flag is enabled."""
        if not self._config.features.events_publish_enabled:
            return

        from notekeeper.backend.events.broker import ensure_connected

        broker = await ensure_connected()
        await broker.publish(
            event.model_dump(),
            stream=stream,
            maxlen=self._config.events.streams.default_maxlen,
        )
        logger.debug(
            "Event published",
            extra={"stream": stream, "event_type": event.event_type, "event_id": event.event_id},
        )
