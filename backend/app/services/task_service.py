"""
Task Service - kanban board operations

Every change that can affect a task's progress or phase recomputes the
owning phase through PhaseService.
"""
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PhaseProjectMismatchError, TaskNotFoundError, ValidationError
from app.core.logging_config import logger
from app.models.activity_log import ActivityAction
from app.models.project import Phase, Project
from app.models.task import Task, TaskStatus
from app.models.user import User
from app.modules.auth.dependencies import get_org_project
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.activity_service import log_activity
from app.services.phase_service import PhaseService


class TaskService:
    """Task CRUD, moves and column ordering"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.phases = PhaseService(db)

    # ========== Queries ==========

    async def list_tasks(self, project_id: str, user: User) -> List[Task]:
        project = await get_org_project(self.db, project_id, user)
        result = await self.db.execute(
            select(Task).where(Task.project_id == project.id).order_by(Task.status, Task.order)
        )
        return list(result.scalars().all())

    async def get_task(self, task_id: str, user: User) -> Task:
        """Task inside the user's organization, else 404"""
        result = await self.db.execute(
            select(Task)
            .join(Project, Project.id == Task.project_id)
            .where(
                Task.id == str(task_id),
                Project.organization_id == str(user.organization_id)
            )
        )
        task = result.scalar_one_or_none()
        if not task:
            raise TaskNotFoundError(str(task_id))
        return task

    async def next_order(self, project_id: str, status: TaskStatus) -> int:
        """Max order inside the status column + 1"""
        current = await self.db.scalar(
            select(func.max(Task.order)).where(
                Task.project_id == str(project_id),
                Task.status == status
            )
        )
        return (current or 0) + 1

    # ========== Mutations ==========

    async def create_task(self, project_id: str, data: TaskCreate, user: User) -> Task:
        project = await get_org_project(self.db, project_id, user)
        await self._check_phase(data.phase_id, project.id)
        await self._check_assignee(data.assignee_id, user)

        task = Task(
            project_id=project.id,
            order=await self.next_order(project.id, data.status),
            **data.model_dump(),
        )
        self.db.add(task)
        await self.db.flush()
        await self.phases.recalculate_by_id(task.phase_id)

        await log_activity(
            self.db, project.id, user.id, ActivityAction.CREATE_TASK,
            {"task_id": task.id, "title": task.title, "status": task.status.value}
        )
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def update_task(self, task_id: str, data: TaskUpdate, user: User) -> Task:
        """Regular partial update, or a kanban move when action == "move" """
        task = await self.get_task(task_id, user)

        if data.action == "move":
            return await self.move_task(task, data.status, data.order, user)

        changes = data.model_dump(exclude_unset=True, exclude={"action", "order"})
        old_phase_id = task.phase_id

        if "phase_id" in changes:
            await self._check_phase(changes["phase_id"], task.project_id)
        if changes.get("assignee_id"):
            await self._check_assignee(changes["assignee_id"], user)
        if changes.get("status") is not None and changes["status"] != task.status:
            # Status change outside a move lands at the bottom of the new column
            task.order = await self.next_order(task.project_id, changes["status"])

        for field, value in changes.items():
            setattr(task, field, value)

        await self.phases.recalculate_by_id(task.phase_id)
        if old_phase_id != task.phase_id:
            await self.phases.recalculate_by_id(old_phase_id)

        await log_activity(
            self.db, task.project_id, user.id, ActivityAction.UPDATE_TASK,
            {"task_id": task.id, "updated_fields": sorted(changes)}
        )
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def move_task(self, task: Task, status: TaskStatus, order: int, user: User) -> Task:
        """
        Put `task` at position `order` of the `status` column and renumber
        that column 1..n. Positions past the end append.
        """
        from_status = task.status

        result = await self.db.execute(
            select(Task)
            .where(
                Task.project_id == task.project_id,
                Task.status == status,
                Task.id != task.id
            )
            .order_by(Task.order)
        )
        column = list(result.scalars().all())

        position = min(max(order, 1), len(column) + 1)
        column.insert(position - 1, task)

        task.status = status
        for index, item in enumerate(column, start=1):
            if item.order != index:
                item.order = index

        await self.phases.recalculate_by_id(task.phase_id)

        await log_activity(
            self.db, task.project_id, user.id, ActivityAction.MOVE_TASK,
            {
                "task_id": task.id,
                "from_status": from_status.value,
                "new_status": status.value,
                "new_order": position,
            }
        )
        await self.db.commit()
        await self.db.refresh(task)

        logger.debug(f"[Tasks] Moved {task.id} {from_status.value} -> {status.value} #{position}")
        return task

    async def delete_task(self, task_id: str, user: User) -> None:
        task = await self.get_task(task_id, user)
        project_id, phase_id = task.project_id, task.phase_id

        await self.db.delete(task)
        await self.phases.recalculate_by_id(phase_id)

        await log_activity(
            self.db, project_id, user.id, ActivityAction.DELETE_TASK,
            {"task_id": str(task_id), "title": task.title}
        )
        await self.db.commit()

    # ========== Validation ==========

    async def _check_phase(self, phase_id: Optional[str], project_id: str) -> None:
        if not phase_id:
            return
        phase = await self.db.get(Phase, str(phase_id))
        if phase is None or phase.project_id != str(project_id):
            raise PhaseProjectMismatchError(str(phase_id), str(project_id))

    async def _check_assignee(self, assignee_id: Optional[str], user: User) -> None:
        if not assignee_id:
            return
        assignee = await self.db.get(User, str(assignee_id))
        if assignee is None or assignee.organization_id != user.organization_id:
            raise ValidationError("Assignee not found in organization", field="assignee_id")
