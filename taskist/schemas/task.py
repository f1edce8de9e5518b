from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, model_validator

from ..enums import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    title: StrictStr = ""
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = Field(None, alias="dueDate")

    model_config = ConfigDict(populate_by_name=True)


class TaskUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    title: Optional[StrictStr] = None
    completed: Optional[StrictBool] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = Field(None, alias="dueDate")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "TaskUpdate":
        # Only dueDate may be sent as null (it clears the date).
        for name in ("title", "completed", "priority", "status"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class TaskRead(BaseModel):
    id: int
    title: str
    completed: bool
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[date] = Field(None, serialization_alias="dueDate")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")

    model_config = ConfigDict(from_attributes=True)


class SuccessResponse(BaseModel):
    success: bool = True
