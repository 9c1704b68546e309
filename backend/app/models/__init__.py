# Re-export all models for convenient imports
from app.models.organization import Organization
from app.models.user import User, UserRole
from app.models.project import Project, Phase
from app.models.task import Task, TaskStatus
from app.models.revision import Revision, RevisionStatus, DECIDED_STATUSES
from app.models.material import MaterialItem, MaterialStatus
from app.models.activity_log import ActivityLog, ActivityAction

__all__ = [
    # Organization / users
    "Organization",
    "User",
    "UserRole",
    # Project
    "Project",
    "Phase",
    # Board
    "Task",
    "TaskStatus",
    # Reviews
    "Revision",
    "RevisionStatus",
    "DECIDED_STATUSES",
    # Materials
    "MaterialItem",
    "MaterialStatus",
    # Activity
    "ActivityLog",
    "ActivityAction",
]
