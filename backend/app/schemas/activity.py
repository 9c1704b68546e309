from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, Any
from datetime import datetime


class ActivityResponse(BaseModel):
    id: str
    project_id: str
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    action: str
    payload: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
