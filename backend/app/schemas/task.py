from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional, Literal
from datetime import datetime

from app.models.task import TaskStatus
from app.schemas.common import UTCDateTime


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=500)
    description: Optional[str] = None
    phase_id: Optional[str] = None
    status: TaskStatus = TaskStatus.BACKLOG
    assignee_id: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    due_date: Optional[UTCDateTime] = None
    progress: int = Field(0, ge=0, le=100)


class TaskUpdate(BaseModel):
    """
    PATCH body for a task.

    With `action="move"` the task is moved to `status` at position `order`
    and the destination column is renumbered; otherwise only the fields
    present in the body are applied.
    """
    action: Optional[Literal["move"]] = None

    title: Optional[str] = Field(None, min_length=2, max_length=500)
    description: Optional[str] = None
    phase_id: Optional[str] = None
    status: Optional[TaskStatus] = None
    order: Optional[int] = Field(None, ge=0)
    assignee_id: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    due_date: Optional[UTCDateTime] = None
    progress: Optional[int] = Field(None, ge=0, le=100)

    @field_validator("title", "status", "progress")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @model_validator(mode='after')
    def validate_move(self):
        if self.action == "move" and (self.status is None or self.order is None):
            raise ValueError("Move requires both status and order")
        return self


class TaskResponse(BaseModel):
    id: str
    project_id: str
    phase_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: TaskStatus
    order: int
    progress: int
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
