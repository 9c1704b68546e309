"""
Project Service - project lifecycle and derived health

Progress and status are never stored on the project row; they are derived
from the phases on every read through app.services.progress.
"""

import secrets
import string
from dataclasses import asdict
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import DuplicateProjectCodeError
from app.core.logging_config import logger
from app.models.activity_log import ActivityAction
from app.models.material import MaterialItem
from app.models.project import Phase, Project
from app.models.task import Task
from app.models.user import User
from app.modules.auth.dependencies import get_org_project
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services.activity_service import list_activity, log_activity
from app.services.phase_service import PhaseService
from app.services.progress import (
    classify_project_status,
    classify_status,
    progress_stats,
    task_stats,
    weighted_progress,
)
from app.utils.pagination import paginate


# (key, name, weight) - weights sum to 100
DEFAULT_PHASES = (
    ("moodboard", "Moodboard", 10),
    ("layout", "Layout", 20),
    ("design", "Design", 25),
    ("material_scheduler", "Material Scheduler", 15),
    ("construction_drawing", "Construction Drawing", 20),
    ("supervision", "Supervision", 10),
)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_SUFFIX_LENGTH = 4
CODE_ATTEMPTS = 5


def generate_project_code(start_date: datetime) -> str:
    """YYYYMMDD-<type>-XXXX from the start date and a random suffix"""
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_SUFFIX_LENGTH))
    return f"{start_date:%Y%m%d}-{settings.PROJECT_TYPE_CODE}-{suffix}"


def build_default_phases(start_date: datetime, end_date: Optional[datetime]) -> list:
    return [
        Phase(
            key=key,
            name=name,
            order=index,
            weight=weight,
            progress=0,
            start_date=start_date,
            due_date=end_date,
        )
        for index, (key, name, weight) in enumerate(DEFAULT_PHASES, start=1)
    ]


def summarize_project(project: Project, now: datetime) -> dict:
    """Project columns plus engine-derived progress and status"""
    progress = weighted_progress(project.phases)
    return {
        "id": project.id,
        "code": project.code,
        "name": project.name,
        "client_name": project.client_name,
        "description": project.description,
        "start_date": project.start_date,
        "end_date": project.end_date,
        "created_at": project.created_at,
        "updated_at": project.updated_at,
        "progress": progress,
        "status": classify_project_status(project.start_date, project.end_date, progress, now),
    }


class ProjectService:
    """Project CRUD scoped to the caller's organization"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========== Queries ==========

    async def list_projects(self, user: User, page: int = 1, page_size: Optional[int] = None,
                            now: Optional[datetime] = None) -> dict:
        now = now or datetime.utcnow()
        query = (
            select(Project)
            .where(Project.organization_id == str(user.organization_id))
            .order_by(Project.created_at.desc())
        )
        result = await paginate(self.db, query, page=page, page_size=page_size)

        projects = [summarize_project(project, now) for project in result.pop("items")]
        return {"projects": projects, **result}

    async def get_detail(self, project_id: str, user: User, now: Optional[datetime] = None) -> dict:
        now = now or datetime.utcnow()
        project = await get_org_project(self.db, project_id, user)

        phases = [
            {
                **{column: getattr(phase, column) for column in (
                    "id", "project_id", "key", "name", "order", "weight",
                    "progress", "start_date", "due_date",
                )},
                "status": classify_status(phase.start_date, phase.due_date, phase.progress, now),
            }
            for phase in project.phases
        ]

        tasks = await self.db.execute(
            select(Task).where(Task.project_id == project.id).order_by(Task.status, Task.order)
        )
        materials = await self.db.execute(
            select(MaterialItem)
            .where(MaterialItem.project_id == project.id)
            .order_by(MaterialItem.created_at.desc())
        )

        return {
            **summarize_project(project, now),
            "phases": phases,
            "tasks": list(tasks.scalars().all()),
            "materials": list(materials.scalars().all()),
            "activity": await list_activity(self.db, project.id),
        }

    async def get_stats(self, project_id: str, user: User, now: Optional[datetime] = None) -> dict:
        now = now or datetime.utcnow()
        project = await get_org_project(self.db, project_id, user)

        result = await self.db.execute(select(Task.status).where(Task.project_id == project.id))
        tasks = [{"status": status} for status in result.scalars().all()]

        phase_counts = progress_stats(project.phases)
        task_counts = task_stats(tasks)

        return {
            "project_id": project.id,
            "progress": phase_counts.overall_progress,
            "status": classify_project_status(
                project.start_date, project.end_date, phase_counts.overall_progress, now
            ),
            "total_phases": phase_counts.total_phases,
            "completed_phases": phase_counts.completed_phases,
            "in_progress_phases": phase_counts.in_progress_phases,
            "not_started_phases": phase_counts.not_started_phases,
            **asdict(task_counts),
        }

    # ========== Mutations ==========

    async def create_project(self, data: ProjectCreate, user: User) -> Project:
        """Create a project with a generated code and the six standard phases"""
        code = await self._unique_code(data.start_date)

        project = Project(
            organization_id=user.organization_id,
            created_by=user.id,
            name=data.name,
            code=code,
            client_name=data.client_name,
            description=data.description,
            start_date=data.start_date,
            end_date=data.end_date,
            phases=build_default_phases(data.start_date, data.end_date),
        )
        self.db.add(project)
        await self.db.flush()

        await log_activity(
            self.db, project.id, user.id, ActivityAction.CREATE_PROJECT,
            {"code": project.code, "name": project.name}
        )
        await self.db.commit()
        await self.db.refresh(project)

        logger.info(f"[Projects] Created {project.code} for organization {user.organization_id}")
        return project

    async def update_project(self, project_id: str, data: ProjectUpdate, user: User) -> Project:
        project = await get_org_project(self.db, project_id, user)

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(project, field, value)

        await log_activity(
            self.db, project.id, user.id, ActivityAction.UPDATE_PROJECT,
            {"fields": sorted(changes)}
        )
        await self.db.commit()
        await self.db.refresh(project)
        return project

    async def delete_project(self, project_id: str, user: User) -> None:
        project = await get_org_project(self.db, project_id, user)
        await self.db.delete(project)
        await self.db.commit()
        logger.info(f"[Projects] Deleted {project.code}")

    async def recalculate(self, project_id: str, user: User, now: Optional[datetime] = None) -> dict:
        """Recompute every phase from its tasks; returns the refreshed summary"""
        now = now or datetime.utcnow()
        project = await get_org_project(self.db, project_id, user)

        phase_service = PhaseService(self.db)
        changed = 0
        for phase in project.phases:
            old_progress, new_progress, _ = await phase_service.recalculate_phase_progress(phase)
            if old_progress != new_progress:
                changed += 1

        await self.db.commit()
        logger.info(f"[Projects] Recalculated {project.code}: {changed} phase(s) changed")
        return summarize_project(project, now)

    async def _unique_code(self, start_date: datetime) -> str:
        for _ in range(CODE_ATTEMPTS):
            code = generate_project_code(start_date)
            existing = await self.db.scalar(select(Project.id).where(Project.code == code))
            if existing is None:
                return code
        raise DuplicateProjectCodeError(code)
