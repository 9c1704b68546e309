from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.permissions import Permission, require_permission
from app.schemas.revision import RevisionStatusUpdate, RevisionResponse
from app.services.revision_service import RevisionService

router = APIRouter()


@router.patch("/{revision_id}", response_model=RevisionResponse)
async def update_revision_status(
    revision_id: str,
    status_data: RevisionStatusUpdate,
    current_user: User = Depends(require_permission(Permission.REVISION_DECIDE)),
    db: AsyncSession = Depends(get_db)
):
    """Move a revision through draft/submitted/approved/rejected"""
    return await RevisionService(db).update_status(revision_id, status_data.status, current_user)


@router.delete("/{revision_id}")
async def delete_revision(
    revision_id: str,
    current_user: User = Depends(require_permission(Permission.REVISION_DELETE)),
    db: AsyncSession = Depends(get_db)
):
    """Delete a draft revision"""
    await RevisionService(db).delete_revision(revision_id, current_user)
    return {"message": "Revision deleted successfully"}
