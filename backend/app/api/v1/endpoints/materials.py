from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.permissions import Permission, require_permission
from app.schemas.material import MaterialUpdate, MaterialResponse
from app.services.material_service import MaterialService

router = APIRouter()


@router.patch("/{material_id}", response_model=MaterialResponse)
async def update_material(
    material_id: str,
    material_data: MaterialUpdate,
    current_user: User = Depends(require_permission(Permission.MATERIAL_MANAGE)),
    db: AsyncSession = Depends(get_db)
):
    return await MaterialService(db).update_material(material_id, material_data, current_user)


@router.delete("/{material_id}")
async def delete_material(
    material_id: str,
    current_user: User = Depends(require_permission(Permission.MATERIAL_MANAGE)),
    db: AsyncSession = Depends(get_db)
):
    await MaterialService(db).delete_material(material_id, current_user)
    return {"message": "Material deleted successfully"}
