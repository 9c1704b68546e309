"""
Phase Service - keeps phase progress in sync with its tasks

Phase progress is the rounded mean of its tasks' progress; project progress
is the weight-averaged phase progress. Both come from app.services.progress.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PhaseNotFoundError
from app.core.logging_config import logger
from app.models.activity_log import ActivityAction
from app.models.project import Phase, Project
from app.models.task import Task
from app.models.user import User
from app.services.activity_service import log_activity
from app.services.progress import average_progress, classify_status, weighted_progress


class PhaseService:
    """Phase lookups and progress recomputation"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_phase(self, phase_id: str, user: User) -> Phase:
        """Phase inside the user's organization, else 404"""
        result = await self.db.execute(
            select(Phase)
            .join(Project, Project.id == Phase.project_id)
            .where(
                Phase.id == str(phase_id),
                Project.organization_id == str(user.organization_id)
            )
        )
        phase = result.scalar_one_or_none()
        if not phase:
            raise PhaseNotFoundError(str(phase_id))
        return phase

    async def get_project_phases(self, project_id: str) -> List[Phase]:
        result = await self.db.execute(
            select(Phase).where(Phase.project_id == str(project_id)).order_by(Phase.order)
        )
        return list(result.scalars().all())

    async def recalculate_phase_progress(self, phase: Phase) -> Tuple[int, int, int]:
        """
        Recompute a phase's progress from its tasks.

        The row is only written when the value changes.
        Returns (old_progress, new_progress, task_count).
        """
        await self.db.flush()
        result = await self.db.execute(
            select(Task.progress).where(Task.phase_id == str(phase.id))
        )
        task_progress = [{"progress": value} for value in result.scalars().all()]

        old_progress = phase.progress
        new_progress = average_progress(task_progress)
        if new_progress != old_progress:
            phase.progress = new_progress
            logger.debug(f"[Phase] {phase.key} progress {old_progress} -> {new_progress}")

        return old_progress, new_progress, len(task_progress)

    async def recalculate_by_id(self, phase_id: Optional[str]) -> None:
        """Recompute the owning phase after a task change; no-op for unphased tasks"""
        if not phase_id:
            return
        phase = await self.db.get(Phase, str(phase_id))
        if phase is not None:
            await self.recalculate_phase_progress(phase)

    async def update_progress(self, phase_id: str, user: User, now: Optional[datetime] = None) -> dict:
        """Recompute one phase, then the project progress and the phase status"""
        now = now or datetime.utcnow()
        phase = await self.get_phase(phase_id, user)

        old_progress, new_progress, task_count = await self.recalculate_phase_progress(phase)

        phases = await self.get_project_phases(phase.project_id)
        project_progress = weighted_progress(phases)
        phase_status = classify_status(phase.start_date, phase.due_date, phase.progress, now)

        await log_activity(
            self.db, phase.project_id, user.id, ActivityAction.UPDATE_PHASE_PROGRESS,
            {
                "phase_id": str(phase.id),
                "phase_name": phase.name,
                "old_progress": old_progress,
                "new_progress": new_progress,
                "task_count": task_count,
            }
        )
        await self.db.commit()
        await self.db.refresh(phase)

        return {
            "phase": phase,
            "project_progress": project_progress,
            "phase_status": phase_status,
        }
