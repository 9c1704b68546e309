"""
Revision Service - design revision review flow

    draft -> submitted -> approved | rejected

Entering `submitted` stamps submitted_at; the first move into a decided
state (approved/rejected) stamps decided_at. Only drafts can be deleted.
"""
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import RevisionNotDeletableError, RevisionNotFoundError
from app.models.activity_log import ActivityAction
from app.models.project import Phase, Project
from app.models.revision import DECIDED_STATUSES, Revision, RevisionStatus
from app.models.user import User
from app.schemas.revision import RevisionCreate
from app.services.activity_service import log_activity
from app.services.phase_service import PhaseService


def apply_status_change(revision: Revision, status: RevisionStatus, now: datetime) -> RevisionStatus:
    """Set the new status and its timestamps; returns the previous status"""
    old_status = revision.status

    if status == RevisionStatus.SUBMITTED and old_status != RevisionStatus.SUBMITTED:
        revision.submitted_at = now
    if status in DECIDED_STATUSES and old_status not in DECIDED_STATUSES:
        revision.decided_at = now

    revision.status = status
    return old_status


class RevisionService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_phase(self, phase_id: str, user: User) -> List[Revision]:
        phase = await PhaseService(self.db).get_phase(phase_id, user)
        result = await self.db.execute(
            select(Revision)
            .where(Revision.phase_id == phase.id)
            .order_by(Revision.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_revision(self, phase_id: str, data: RevisionCreate, user: User) -> Revision:
        phase = await PhaseService(self.db).get_phase(phase_id, user)

        revision = Revision(
            phase_id=phase.id,
            label=data.label,
            notes=data.notes,
            status=RevisionStatus.DRAFT,
            created_by=user.id,
        )
        self.db.add(revision)
        await self.db.flush()

        await log_activity(
            self.db, phase.project_id, user.id, ActivityAction.CREATE_REVISION,
            {"revision_id": revision.id, "label": revision.label, "phase_id": phase.id}
        )
        await self.db.commit()
        await self.db.refresh(revision)
        return revision

    async def get_revision(self, revision_id: str, user: User) -> Revision:
        """Revision inside the user's organization, else 404"""
        result = await self.db.execute(
            select(Revision)
            .join(Phase, Phase.id == Revision.phase_id)
            .join(Project, Project.id == Phase.project_id)
            .where(
                Revision.id == str(revision_id),
                Project.organization_id == str(user.organization_id)
            )
        )
        revision = result.scalar_one_or_none()
        if not revision:
            raise RevisionNotFoundError(str(revision_id))
        return revision

    async def update_status(self, revision_id: str, status: RevisionStatus, user: User) -> Revision:
        revision = await self.get_revision(revision_id, user)
        old_status = apply_status_change(revision, status, datetime.utcnow())

        project_id = await self._project_id(revision)
        await log_activity(
            self.db, project_id, user.id, ActivityAction.UPDATE_REVISION_STATUS,
            {
                "revision_id": revision.id,
                "label": revision.label,
                "old_status": old_status.value,
                "new_status": status.value,
                "phase_id": revision.phase_id,
            }
        )
        await self.db.commit()
        await self.db.refresh(revision)
        return revision

    async def delete_revision(self, revision_id: str, user: User) -> None:
        revision = await self.get_revision(revision_id, user)
        if revision.status != RevisionStatus.DRAFT:
            raise RevisionNotDeletableError(revision.status.value)

        project_id = await self._project_id(revision)
        await self.db.delete(revision)
        await log_activity(
            self.db, project_id, user.id, ActivityAction.DELETE_REVISION,
            {"revision_id": revision.id, "label": revision.label, "phase_id": revision.phase_id}
        )
        await self.db.commit()

    async def _project_id(self, revision: Revision) -> str:
        return await self.db.scalar(select(Phase.project_id).where(Phase.id == revision.phase_id))
