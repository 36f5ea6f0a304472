"""
Tasks API Endpoints.

Checklist items of the signed-in user.
"""

from fastapi import APIRouter

from notekeeper.backend.core.dependencies import CurrentUser, DbSession
from notekeeper.backend.schemas.base import ApiResponse
from notekeeper.backend.schemas.task import TaskCreate, TaskResponse
from notekeeper.backend.services.task import TaskService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[TaskResponse]],
    summary="List tasks",
)
async def list_tasks(db: DbSession, user: CurrentUser) -> ApiResponse[list[TaskResponse]]:
    service = TaskService(db)
    tasks = await service.list_tasks(user.id)
    return ApiResponse(data=[TaskResponse.model_validate(task) for task in tasks])


@router.post(
    "",
    response_model=ApiResponse[TaskResponse],
    status_code=201,
    summary="Add a task",
)
async def add_task(
    data: TaskCreate,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[TaskResponse]:
    service = TaskService(db)
    task = await service.add_task(user.id, data.text)
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.post(
    "/{task_id}/toggle",
    response_model=ApiResponse[TaskResponse],
    summary="Toggle a task",
)
async def toggle_task(
    task_id: str,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[TaskResponse]:
    service = TaskService(db)
    task = await service.toggle_task(user.id, task_id)
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.delete(
    "/{task_id}",
    status_code=204,
    summary="Delete a task",
)
async def delete_task(task_id: str, db: DbSession, user: CurrentUser) -> None:
    service = TaskService(db)
    await service.delete_task(user.id, task_id)
