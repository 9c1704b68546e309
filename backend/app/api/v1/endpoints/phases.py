from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.permissions import Permission, require_permission
from app.schemas.phase import PhaseProgressResponse
from app.schemas.revision import RevisionCreate, RevisionResponse
from app.services.phase_service import PhaseService
from app.services.revision_service import RevisionService

router = APIRouter()


@router.post("/{phase_id}/update-progress", response_model=PhaseProgressResponse)
async def update_phase_progress(
    phase_id: str,
    current_user: User = Depends(require_permission(Permission.PHASE_RECALCULATE)),
    db: AsyncSession = Depends(get_db)
):
    """Recompute the phase from its tasks and report project progress and phase health"""
    return await PhaseService(db).update_progress(phase_id, current_user)


@router.get("/{phase_id}/revisions", response_model=List[RevisionResponse])
async def list_revisions(
    phase_id: str,
    current_user: User = Depends(require_permission(Permission.PROJECT_VIEW)),
    db: AsyncSession = Depends(get_db)
):
    return await RevisionService(db).list_for_phase(phase_id, current_user)


@router.post("/{phase_id}/revisions", response_model=RevisionResponse, status_code=status.HTTP_201_CREATED)
async def create_revision(
    phase_id: str,
    revision_data: RevisionCreate,
    current_user: User = Depends(require_permission(Permission.REVISION_CREATE)),
    db: AsyncSession = Depends(get_db)
):
    """Create a draft revision for the phase"""
    return await RevisionService(db).create_revision(phase_id, revision_data, current_user)
