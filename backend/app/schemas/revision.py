from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

from app.models.revision import RevisionStatus


class RevisionCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=100)
    notes: Optional[str] = None


class RevisionStatusUpdate(BaseModel):
    status: RevisionStatus


class RevisionResponse(BaseModel):
    id: str
    phase_id: str
    label: str
    notes: Optional[str] = None
    status: RevisionStatus
    submitted_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_by_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
