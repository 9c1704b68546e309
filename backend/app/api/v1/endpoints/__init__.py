# API endpoints
from . import auth, projects, phases, tasks, revisions, materials, health

__all__ = ["auth", "projects", "phases", "tasks", "revisions", "materials", "health"]
