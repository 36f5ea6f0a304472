"""
Task Model.

Checklist items for the task-manager view.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from notekeeper.backend.models.base import Base, OwnedMixin, TimestampMixin, UUIDMixin


class Task(UUIDMixin, OwnedMixin, TimestampMixin, Base):
    """Task database model."""

    __tablename__ = "tasks"

    text: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    completed: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, completed={self.completed})>"
