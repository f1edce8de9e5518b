from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_current_identity, get_task_store
from ..enums import TaskSort, TaskStatus
from ..schemas import SuccessResponse, TaskCreate, TaskRead, TaskUpdate
from ..security import Identity
from ..services.tasks import TaskStore

router = APIRouter()


@router.get("", response_model=list[TaskRead])
def list_tasks(
    sort_by: TaskSort = Query(TaskSort.NEWEST, alias="sortBy"),
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    identity: Identity = Depends(get_current_identity),
    tasks: TaskStore = Depends(get_task_store),
):
    return tasks.list(identity.user_id, sort_by=sort_by, status=status_filter)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    identity: Identity = Depends(get_current_identity),
    tasks: TaskStore = Depends(get_task_store),
):
    return tasks.create(
        identity.user_id,
        payload.title,
        priority=payload.priority,
        status=payload.status,
        due_date=payload.due_date,
    )


@router.put("/{task_id}", response_model=SuccessResponse)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    identity: Identity = Depends(get_current_identity),
    tasks: TaskStore = Depends(get_task_store),
):
    changes = payload.model_dump(include=payload.model_fields_set)
    tasks.update(identity.user_id, task_id, **changes)
    return SuccessResponse()


@router.delete("/{task_id}", response_model=SuccessResponse)
def delete_task(
    task_id: int,
    identity: Identity = Depends(get_current_identity),
    tasks: TaskStore = Depends(get_task_store),
):
    tasks.delete(identity.user_id, task_id)
    return SuccessResponse()
