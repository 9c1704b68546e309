from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.permissions import Permission, require_permission
from app.schemas.task import TaskUpdate, TaskResponse
from app.services.task_service import TaskService

router = APIRouter()


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    current_user: User = Depends(require_permission(Permission.TASK_MANAGE)),
    db: AsyncSession = Depends(get_db)
):
    """Partial update, or `{"action": "move", "status", "order"}` to move on the board"""
    return await TaskService(db).update_task(task_id, task_data, current_user)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    current_user: User = Depends(require_permission(Permission.TASK_MANAGE)),
    db: AsyncSession = Depends(get_db)
):
    await TaskService(db).delete_task(task_id, current_user)
    return {"message": "Task deleted successfully"}
