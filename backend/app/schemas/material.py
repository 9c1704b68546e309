from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from app.models.material import MaterialStatus


class MaterialCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=2, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    vendor: Optional[str] = None
    url: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    status: MaterialStatus = MaterialStatus.SAMPLED
    notes: Optional[str] = None


class MaterialUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    vendor: Optional[str] = None
    url: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    status: Optional[MaterialStatus] = None
    notes: Optional[str] = None

    @field_validator("code", "name", "category", "status")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class MaterialResponse(BaseModel):
    id: str
    project_id: str
    code: str
    name: str
    category: str
    vendor: Optional[str] = None
    url: Optional[str] = None
    price: Optional[float] = None
    status: MaterialStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
