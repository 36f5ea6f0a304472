"""
Task Service.

Checklist items for the task-manager view.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.backend.models.task import Task
from notekeeper.backend.repositories.task import TaskRepository
from notekeeper.backend.services.base import BaseService


class TaskService(BaseService):
    """Service for task business logic."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = TaskRepository(session)

    async def list_tasks(self, owner_id: str) -> list[Task]:
        return await self.repo.list_for_owner(owner_id)

    async def add_task(self, owner_id: str, text: str) -> Task:
        """
        Add a task.

        Raises:
            ValidationError: If the text is blank
        """
        self._validate_required({"text": text}, ["text"])
        self._log_operation("Adding task", owner_id=owner_id)
        return await self._execute_db_operation(
            "add_task",
            self.repo.create(owner_id=owner_id, text=text.strip()),
        )

    async def toggle_task(self, owner_id: str, task_id: str) -> Task:
        """Flip a task between open and completed."""
        task = await self.repo.get_owned(owner_id, task_id)
        return await self._execute_db_operation(
            "toggle_task",
            self.repo.update_instance(task, completed=not task.completed),
        )

    async def delete_task(self, owner_id: str, task_id: str) -> None:
        task = await self.repo.get_owned(owner_id, task_id)
        self._log_operation("Deleting task", task_id=task_id)
        await self._execute_db_operation(
            "delete_task",
            self.repo.delete_instance(task),
        )
