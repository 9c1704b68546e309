"""Material Service - per-project material schedule"""
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import MaterialNotFoundError
from app.models.activity_log import ActivityAction
from app.models.material import MaterialItem
from app.models.project import Project
from app.models.user import User
from app.modules.auth.dependencies import get_org_project
from app.schemas.material import MaterialCreate, MaterialUpdate
from app.services.activity_service import log_activity


class MaterialService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_materials(self, project_id: str, user: User) -> List[MaterialItem]:
        project = await get_org_project(self.db, project_id, user)
        result = await self.db.execute(
            select(MaterialItem)
            .where(MaterialItem.project_id == project.id)
            .order_by(MaterialItem.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_material(self, material_id: str, user: User) -> MaterialItem:
        result = await self.db.execute(
            select(MaterialItem)
            .join(Project, Project.id == MaterialItem.project_id)
            .where(
                MaterialItem.id == str(material_id),
                Project.organization_id == str(user.organization_id)
            )
        )
        material = result.scalar_one_or_none()
        if not material:
            raise MaterialNotFoundError(str(material_id))
        return material

    async def create_material(self, project_id: str, data: MaterialCreate, user: User) -> MaterialItem:
        project = await get_org_project(self.db, project_id, user)

        material = MaterialItem(project_id=project.id, **data.model_dump())
        self.db.add(material)
        await self.db.flush()

        await log_activity(
            self.db, project.id, user.id, ActivityAction.CREATE_MATERIAL,
            {"material_id": material.id, "code": material.code, "name": material.name}
        )
        await self.db.commit()
        await self.db.refresh(material)
        return material

    async def update_material(self, material_id: str, data: MaterialUpdate, user: User) -> MaterialItem:
        material = await self.get_material(material_id, user)

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(material, field, value)

        await log_activity(
            self.db, material.project_id, user.id, ActivityAction.UPDATE_MATERIAL,
            {"material_id": material.id, "updated_fields": sorted(changes)}
        )
        await self.db.commit()
        await self.db.refresh(material)
        return material

    async def delete_material(self, material_id: str, user: User) -> None:
        material = await self.get_material(material_id, user)
        await self.db.delete(material)

        await log_activity(
            self.db, material.project_id, user.id, ActivityAction.DELETE_MATERIAL,
            {"material_id": material.id, "code": material.code}
        )
        await self.db.commit()
