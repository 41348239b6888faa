import logging

from fastapi import APIRouter, Body, Depends, status

from app.core.exceptions import (
    CREATE_TASK_ERROR,
    FETCH_TASKS_ERROR,
    PersistenceError,
    create_task_error_response,
    error_response,
    fetch_tasks_error_response,
)
from app.database import TaskStore, get_task_store
from app.models import TaskCreate, TaskResponse
from app.services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get(
    "",
    response_model=list[TaskResponse],
    responses={**fetch_tasks_error_response},
)
async def get_tasks(store: TaskStore = Depends(get_task_store)):
    """List every stored task"""
    try:
        return await TaskService.get_all_tasks(store)
    except PersistenceError as e:
        logger.error(f"Error fetching tasks: {e}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, FETCH_TASKS_ERROR)


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**create_task_error_response},
)
async def create_task(
    task_data: TaskCreate | None = Body(default=None),
    store: TaskStore = Depends(get_task_store),
):
    """Create a new task"""
    try:
        return await TaskService.create_task(task_data, store)
    except PersistenceError as e:
        logger.error(f"Error creating task: {e}")
        return error_response(status.HTTP_400_BAD_REQUEST, CREATE_TASK_ERROR)
