"""
Unit Tests for project code generation, revision transitions and the activity feed
"""
import re
from datetime import datetime

import pytest

from app.core.types import next_sequence
from app.models.activity_log import ActivityAction
from app.models.revision import Revision, RevisionStatus
from app.services.activity_service import list_activity, log_activity
from app.services.project_service import (
    DEFAULT_PHASES,
    build_default_phases,
    generate_project_code,
)
from app.services.revision_service import apply_status_change

NOW = datetime(2025, 6, 1, 10, 0)


class TestProjectCode:
    """Test YYYYMMDD-INT-XXXX project codes"""

    def test_format(self):
        code = generate_project_code(datetime(2025, 5, 12))

        assert re.fullmatch(r"20250512-INT-[A-Z0-9]{4}", code)

    def test_suffix_varies(self):
        codes = {generate_project_code(datetime(2025, 5, 12)) for _ in range(20)}
        assert len(codes) > 1


class TestDefaultPhases:
    """Test the six standard phases"""

    def test_weights_sum_to_100(self):
        assert sum(weight for _, _, weight in DEFAULT_PHASES) == 100

    def test_phases_follow_project_dates(self):
        start, end = datetime(2025, 5, 12), datetime(2025, 6, 30)
        phases = build_default_phases(start, end)

        assert [p.name for p in phases] == [
            "Moodboard", "Layout", "Design", "Material Scheduler",
            "Construction Drawing", "Supervision",
        ]
        assert [p.order for p in phases] == [1, 2, 3, 4, 5, 6]
        assert all(p.start_date == start and p.due_date == end for p in phases)
        assert all(p.progress == 0 for p in phases)


class TestRevisionTransitions:
    """Test timestamps stamped on status changes"""

    def make_revision(self, status: RevisionStatus, **kwargs) -> Revision:
        return Revision(label="D1", status=status, **kwargs)

    def test_submit_stamps_submitted_at(self):
        revision = self.make_revision(RevisionStatus.DRAFT)

        old = apply_status_change(revision, RevisionStatus.SUBMITTED, NOW)

        assert old == RevisionStatus.DRAFT
        assert revision.status == RevisionStatus.SUBMITTED
        assert revision.submitted_at == NOW
        assert revision.decided_at is None

    def test_resubmit_keeps_first_timestamp(self):
        earlier = datetime(2025, 5, 1)
        revision = self.make_revision(RevisionStatus.SUBMITTED, submitted_at=earlier)

        apply_status_change(revision, RevisionStatus.SUBMITTED, NOW)

        assert revision.submitted_at == earlier

    @pytest.mark.parametrize("decision", [RevisionStatus.APPROVED, RevisionStatus.REJECTED])
    def test_decision_stamps_decided_at(self, decision):
        revision = self.make_revision(RevisionStatus.SUBMITTED)

        apply_status_change(revision, decision, NOW)

        assert revision.decided_at == NOW

    def test_switching_decision_keeps_decided_at(self):
        earlier = datetime(2025, 5, 20)
        revision = self.make_revision(RevisionStatus.APPROVED, decided_at=earlier)

        apply_status_change(revision, RevisionStatus.REJECTED, NOW)

        assert revision.status == RevisionStatus.REJECTED
        assert revision.decided_at == earlier

    def test_back_to_draft_stamps_nothing(self):
        revision = self.make_revision(RevisionStatus.REJECTED)

        apply_status_change(revision, RevisionStatus.DRAFT, NOW)

        assert revision.submitted_at is None
        assert revision.decided_at is None


class TestActivityFeed:
    """Test newest-first ordering of the activity feed"""

    def test_sequence_strictly_increases(self):
        values = [next_sequence() for _ in range(1000)]
        assert values == sorted(set(values))

    @pytest.mark.asyncio
    async def test_equal_timestamps_keep_write_order(self, db_session, project, pm_user):
        stamp = datetime(2100, 1, 1, 12, 0)
        for step in (1, 2, 3):
            entry = await log_activity(
                db_session, project.id, pm_user.id, ActivityAction.UPDATE_PROJECT, {"step": step}
            )
            entry.created_at = stamp
            await db_session.flush()
        await db_session.commit()

        feed = await list_activity(db_session, project.id)

        assert [entry.payload for entry in feed[:3]] == [{"step": 3}, {"step": 2}, {"step": 1}]
        assert feed[3].action == ActivityAction.CREATE_PROJECT
