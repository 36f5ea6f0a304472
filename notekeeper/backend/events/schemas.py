"""
Event Schemas.

Standardized event envelope and note lifecycle event types.
All events published through the event bus use the EventEnvelope base.

Naming convention for event_type: domain.entity.action (dot notation)
Stream naming convention: {prefix}:{entity}-{action} (colon-separated)

Usage:
    from notekeeper.backend.events.schemas import NoteCreated

    event = NoteCreated(
        source="note-service",
        correlation_id=request_id,
        payload={"note_id": note.id, "owner_id": note.owner_id},
    )
"""

from uuid import uuid4

from pydantic import BaseModel, Field

from notekeeper.backend.core.utils import utc_now


class EventEnvelope(BaseModel):
    """Base event envelope for every published event.

    Fields:
        event_id: Unique event identifier (auto-generated UUID)
        event_type: Domain event type in dot notation (e.g. notes.note.created)
        event_version: Schema version for forward compatibility
        timestamp: ISO 8601 UTC timestamp
        source: Service/module that published the event
        correlation_id: Request ID of the HTTP call that caused the event
        payload: Event-specific data
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: str
    event_version: int = 1
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    source: str
    correlation_id: str
    payload: dict


class NoteCreated(EventEnvelope):
    """Published when a new note is created."""

    event_type: str = "notes.note.created"


class NoteUpdated(EventEnvelope):
    """Published when a note is edited."""

    event_type: str = "notes.note.updated"


class NoteTrashed(EventEnvelope):
    """Published when a note moves to the trash."""

    event_type: str = "notes.note.trashed"


class NoteRestored(EventEnvelope):
    """Published when a note comes back from the trash."""

    event_type: str = "notes.note.restored"


class NotePurged(EventEnvelope):
    """Published when a note is removed permanently."""

    event_type: str = "notes.note.purged"
