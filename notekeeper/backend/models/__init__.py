# SQLAlchemy models package
from notekeeper.backend.models.base import Base
from notekeeper.backend.models.note import Note
from notekeeper.backend.models.task import Task
from notekeeper.backend.models.user import User

__all__ = [
    "Base",
    "Note",
    "Task",
    "User",
]
