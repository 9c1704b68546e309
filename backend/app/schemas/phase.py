from pydantic import BaseModel

from app.schemas.project import PhaseResponse
from app.services.progress import HealthStatus


class PhaseProgressResponse(BaseModel):
    """Result of recomputing one phase from its tasks"""
    phase: PhaseResponse
    project_progress: int
    phase_status: HealthStatus
