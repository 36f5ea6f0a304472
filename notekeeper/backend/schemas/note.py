"""
Note Schemas.

Pydantic schemas for note API request/response validation, plus the
folder and sort vocabulary shared by the API and the client list view.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

FOLDER_ALL = "All Notes"
FOLDER_PINNED = "Pinned"
FOLDER_TRASH = "Recently Deleted"


class NoteSort(str, Enum):
    """Sort keys for the note list."""

    UPDATED_AT = "updated_at"
    CREATED_AT = "created_at"
    TITLE = "title"


def normalize_tags(tags: list[str]) -> list[str]:
    """Strip tags, drop blanks and duplicates, keep first-seen order."""
    seen: dict[str, None] = {}
    for tag in tags:
        cleaned = tag.strip()
        if cleaned and cleaned not in seen:
            seen[cleaned] = None
    return list(seen)


class NoteCreate(BaseModel):
    """Schema for creating a new note."""

    title: str = Field(
        default="",
        max_length=255,
        description="Note title; blank becomes 'Untitled Note'",
        examples=["Groceries"],
    )
    content: str = Field(
        default="",
        description="Note content",
        examples=["Milk, eggs, bread"],
    )
    tags: list[str] = Field(default_factory=list, description="Tags in display order")
    pinned: bool = False
    public: bool = False
    folder: str | None = Field(default=None, max_length=100)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, tags: list[str]) -> list[str]:
        return normalize_tags(tags)


class NoteUpdate(BaseModel):
    """Schema for updating an existing note. Only set fields are written."""

    title: str | None = Field(default=None, max_length=255)
    content: str | None = None
    tags: list[str] | None = None
    pinned: bool | None = None
    public: bool | None = None
    folder: str | None = Field(default=None, max_length=100)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, tags: list[str] | None) -> list[str] | None:
        return normalize_tags(tags) if tags is not None else None


class NoteResponse(BaseModel):
    """Schema for a note in API responses."""

    id: str = Field(description="Note unique identifier")
    title: str
    content: str
    tags: list[str]
    pinned: bool
    public: bool
    deleted: bool
    deleted_at: datetime | None = None
    folder: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PublicNoteResponse(BaseModel):
    """What the public share link exposes."""

    id: str
    title: str
    content: str
    tags: list[str]
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PurgeReport(BaseModel):
    """Outcome of emptying the trash."""

    purged: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
