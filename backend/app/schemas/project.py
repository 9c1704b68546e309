from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

from app.schemas.common import UTCDateTime
from app.schemas.task import TaskResponse
from app.schemas.material import MaterialResponse
from app.schemas.activity import ActivityResponse
from app.services.progress import HealthStatus


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=500)
    client_name: str = Field(..., min_length=2, max_length=255)
    start_date: UTCDateTime
    end_date: Optional[UTCDateTime] = None
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    """Partial update; only fields present in the body are applied"""
    name: Optional[str] = Field(None, min_length=2, max_length=500)
    client_name: Optional[str] = Field(None, min_length=2, max_length=255)
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None  # explicit null clears the deadline
    description: Optional[str] = None

    @field_validator("name", "client_name", "start_date")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class PhaseResponse(BaseModel):
    id: str
    project_id: str
    key: str
    name: str
    order: int
    weight: float
    progress: int
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    status: Optional[HealthStatus] = None

    model_config = ConfigDict(from_attributes=True)


class ProjectSummary(BaseModel):
    id: str
    code: str
    name: str
    client_name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    progress: int
    status: HealthStatus

    model_config = ConfigDict(from_attributes=True)


class ProjectDetail(ProjectSummary):
    phases: List[PhaseResponse] = []
    tasks: List[TaskResponse] = []
    materials: List[MaterialResponse] = []
    activity: List[ActivityResponse] = []


class ProjectListResponse(BaseModel):
    projects: List[ProjectSummary]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class ProjectStatsResponse(BaseModel):
    project_id: str
    progress: int
    status: HealthStatus
    total_phases: int
    completed_phases: int
    in_progress_phases: int
    not_started_phases: int
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    review_tasks: int
    backlog_tasks: int
