import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy import case, delete, select, update
from sqlalchemy.orm import Session

from ..enums import PRIORITY_RANK, TaskPriority, TaskSort, TaskStatus
from ..errors import NotFoundError, ValidationError
from ..models import Task

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 2
# Ids outside a signed 64-bit INTEGER can never match a row.
MAX_TASK_ID = 2**63 - 1
_UNSET: Any = object()


def clean_title(value: str) -> str:
    title = value.strip()
    if len(title) < TITLE_MIN_LENGTH:
        raise ValidationError(f"Title must be at least {TITLE_MIN_LENGTH} characters.")
    return title


_priority_rank = case(
    *((Task.priority == priority, rank) for priority, rank in PRIORITY_RANK.items()),
    else_=PRIORITY_RANK[TaskPriority.MEDIUM],
)


class TaskStore:
    """Task persistence where every statement is filtered by the owning user."""

    def __init__(self, db: Session):
        self.db = db

    def list(
        self,
        user_id: int,
        sort_by: TaskSort = TaskSort.NEWEST,
        status: Optional[TaskStatus] = None,
    ) -> list[Task]:
        query = select(Task).where(Task.owner_id == user_id)
        if status is not None:
            query = query.where(Task.status == status)

        if sort_by == TaskSort.PRIORITY:
            query = query.order_by(_priority_rank.desc(), Task.id.desc())
        elif sort_by == TaskSort.DUE_DATE:
            query = query.order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.id.desc())
        else:
            query = query.order_by(Task.id.desc())
        return list(self.db.scalars(query).all())

    def create(
        self,
        user_id: int,
        title: str,
        priority: Optional[TaskPriority] = None,
        status: Optional[TaskStatus] = None,
        due_date: Optional[date] = None,
    ) -> Task:
        task = Task(
            owner_id=user_id,
            title=clean_title(title),
            completed=False,
            priority=priority or TaskPriority.MEDIUM,
            status=status or TaskStatus.TODO,
            due_date=due_date,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        logger.info("Created task %s for user %s", task.id, user_id)
        return task

    def update(
        self,
        user_id: int,
        task_id: int,
        *,
        title: Optional[str] = None,
        completed: Optional[bool] = None,
        priority: Optional[TaskPriority] = None,
        status: Optional[TaskStatus] = None,
        due_date: Any = _UNSET,
    ) -> None:
        """Apply the provided fields in one statement, or raise NotFoundError.

        ``due_date=None`` clears the date; leave it out to keep the stored one.
        """

        changes: dict[str, Any] = {}
        if title is not None:
            changes["title"] = clean_title(title)
        if completed is not None:
            changes["completed"] = completed
        if priority is not None:
            changes["priority"] = priority
        if status is not None:
            changes["status"] = status
        if due_date is not _UNSET:
            changes["due_date"] = due_date
        if not changes:
            raise ValidationError("Nothing to update.")
        if not 0 < task_id <= MAX_TASK_ID:
            raise NotFoundError()

        result = self.db.execute(
            update(Task)
            .where(Task.id == task_id, Task.owner_id == user_id)
            .values(**changes)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise NotFoundError()
        self.db.commit()

    def delete(self, user_id: int, task_id: int) -> None:
        if not 0 < task_id <= MAX_TASK_ID:
            raise NotFoundError()
        result = self.db.execute(
            delete(Task)
            .where(Task.id == task_id, Task.owner_id == user_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise NotFoundError()
        self.db.commit()
        logger.info("Deleted task %s for user %s", task_id, user_id)
