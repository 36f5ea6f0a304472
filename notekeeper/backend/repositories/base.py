"""
Base Repository.

Repositories run queries and flush; they never commit. The request
session in core.database commits once the handler returns.

    class TaskRepository(OwnedRepository[Task]):
        model = Task
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.backend.core.exceptions import NotFoundError
from notekeeper.backend.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id_or_none(self, id: str) -> ModelType | None:
        return await self.session.get(self.model, id)

    async def create(self, **fields: Any) -> ModelType:
        """Insert and return the row with database defaults loaded."""
        instance = self.model(**fields)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update_instance(self, instance: ModelType, **fields: Any) -> ModelType:
        """Set the given columns on a loaded row. Unknown names are ignored."""
        for name, value in fields.items():
            if hasattr(instance, name):
                setattr(instance, name, value)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete_instance(self, instance: ModelType) -> None:
        await self.session.delete(instance)
        await self.session.flush()


class OwnedRepository(BaseRepository[ModelType]):
    """Rows carrying owner_id. Another user's row is indistinguishable from a missing one."""

    async def get_owned(self, owner_id: str, id: str) -> ModelType:
        """
        Raises:
            NotFoundError: "<Model> not found" for a missing or foreign row
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == id, self.model.owner_id == owner_id)
        )
        instance = result.scalar_one_or_none()
        if instance is None:
            raise NotFoundError(f"{self.model.__name__} not found")
        return instance
