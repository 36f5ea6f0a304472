"""
Task Repository.

Data access layer for task-manager items.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.backend.models.task import Task
from notekeeper.backend.repositories.base import OwnedRepository


class TaskRepository(OwnedRepository[Task]):
    """Repository for Task model."""

    model = Task

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_for_owner(self, owner_id: str) -> list[Task]:
        """List an owner's tasks, open items first, oldest first."""
        result = await self.session.execute(
            select(Task)
            .where(Task.owner_id == owner_id)
            .order_by(Task.completed.asc(), Task.created_at.asc(), Task.id.asc())
        )
        return list(result.scalars().all())
