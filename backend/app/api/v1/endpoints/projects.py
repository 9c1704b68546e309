from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_org_project
from app.modules.auth.permissions import Permission, require_permission
from app.schemas.activity import ActivityResponse
from app.schemas.material import MaterialCreate, MaterialResponse
from app.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectSummary,
    ProjectDetail,
    ProjectListResponse,
    ProjectStatsResponse,
)
from app.schemas.task import TaskCreate, TaskResponse
from app.services.activity_service import list_activity
from app.services.material_service import MaterialService
from app.services.project_service import ProjectService, summarize_project
from app.services.task_service import TaskService

router = APIRouter()

view_projects = require_permission(Permission.PROJECT_VIEW)


# ========== Projects ==========

@router.get("", response_model=ProjectListResponse)
async def list_projects(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(view_projects),
    db: AsyncSession = Depends(get_db)
):
    """List the organization's projects, newest first, with derived progress/status"""
    return await ProjectService(db).list_projects(current_user, page=page, page_size=page_size)


@router.post("", response_model=ProjectSummary, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    current_user: User = Depends(require_permission(Permission.PROJECT_CREATE)),
    db: AsyncSession = Depends(get_db)
):
    """Create a project seeded with the six standard phases"""
    project = await ProjectService(db).create_project(project_data, current_user)
    return summarize_project(project, datetime.utcnow())


@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(
    project_id: str,
    current_user: User = Depends(view_projects),
    db: AsyncSession = Depends(get_db)
):
    """Project detail with phases, tasks, materials and latest activity"""
    return await ProjectService(db).get_detail(project_id, current_user)


@router.patch("/{project_id}", response_model=ProjectSummary)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    current_user: User = Depends(require_permission(Permission.PROJECT_UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    project = await ProjectService(db).update_project(project_id, project_data, current_user)
    return summarize_project(project, datetime.utcnow())


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    current_user: User = Depends(require_permission(Permission.PROJECT_DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await ProjectService(db).delete_project(project_id, current_user)
    return {"message": "Project deleted successfully"}


@router.get("/{project_id}/stats", response_model=ProjectStatsResponse)
async def get_project_stats(
    project_id: str,
    current_user: User = Depends(view_projects),
    db: AsyncSession = Depends(get_db)
):
    """Phase and task counts plus overall progress"""
    return await ProjectService(db).get_stats(project_id, current_user)


@router.post("/{project_id}/recalculate", response_model=ProjectSummary)
async def recalculate_project(
    project_id: str,
    current_user: User = Depends(require_permission(Permission.PHASE_RECALCULATE)),
    db: AsyncSession = Depends(get_db)
):
    """Recompute every phase's progress from its tasks"""
    return await ProjectService(db).recalculate(project_id, current_user)


# ========== Nested collections ==========

@router.get("/{project_id}/tasks", response_model=List[TaskResponse])
async def list_tasks(
    project_id: str,
    current_user: User = Depends(view_projects),
    db: AsyncSession = Depends(get_db)
):
    return await TaskService(db).list_tasks(project_id, current_user)


@router.post("/{project_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    project_id: str,
    task_data: TaskCreate,
    current_user: User = Depends(require_permission(Permission.TASK_MANAGE)),
    db: AsyncSession = Depends(get_db)
):
    return await TaskService(db).create_task(project_id, task_data, current_user)


@router.get("/{project_id}/materials", response_model=List[MaterialResponse])
async def list_materials(
    project_id: str,
    current_user: User = Depends(view_projects),
    db: AsyncSession = Depends(get_db)
):
    return await MaterialService(db).list_materials(project_id, current_user)


@router.post("/{project_id}/materials", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
async def create_material(
    project_id: str,
    material_data: MaterialCreate,
    current_user: User = Depends(require_permission(Permission.MATERIAL_MANAGE)),
    db: AsyncSession = Depends(get_db)
):
    return await MaterialService(db).create_material(project_id, material_data, current_user)


@router.get("/{project_id}/activity", response_model=List[ActivityResponse])
async def list_project_activity(
    project_id: str,
    limit: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(view_projects),
    db: AsyncSession = Depends(get_db)
):
    """Activity feed, newest first"""
    project = await get_org_project(db, project_id, current_user)
    return await list_activity(db, project.id, limit=limit)
