"""
Note Model.

A note belongs to one user and moves between two states: active
(deleted=False) and trashed (deleted=True). Purging removes the row.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from notekeeper.backend.models.base import Base, OwnedMixin, TimestampMixin, UUIDMixin

DEFAULT_FOLDER = "All Notes"
UNTITLED_TITLE = "Untitled Note"


class Note(UUIDMixin, OwnedMixin, TimestampMixin, Base):
    """Note database model."""

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default=UNTITLED_TITLE,
        index=True,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    tags: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    pinned: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )
    public: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )
    deleted: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
        index=True,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )
    folder: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default=DEFAULT_FOLDER,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, deleted={self.deleted})>"
