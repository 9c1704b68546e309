"""
Tests for the demo data seeder
"""
import pytest
from sqlalchemy import func, select

from app.models import MaterialItem, Project, Revision, Task, User
from seed_demo_data import DEMO_MATERIALS, DEMO_TASKS, DEMO_USERS, seed_demo_data


class TestSeedDemoData:

    @pytest.mark.asyncio
    async def test_seeds_sample_project(self, db_session):
        project = await seed_demo_data(db_session)

        assert project.code == '202505-INT-BED01'
        assert len(project.phases) == 6
        assert await db_session.scalar(select(func.count(Task.id))) == len(DEMO_TASKS)
        assert await db_session.scalar(select(func.count(MaterialItem.id))) == len(DEMO_MATERIALS)
        assert await db_session.scalar(select(func.count(Revision.id))) == 2

    @pytest.mark.asyncio
    async def test_phase_progress_from_tasks(self, db_session):
        project = await seed_demo_data(db_session)

        progress = {phase.key: phase.progress for phase in project.phases}
        # (100 + 100 + 75) / 3 = 91.67
        assert progress['moodboard'] == 92
        # (100 + 60 + 0) / 3
        assert progress['layout'] == 53
        assert progress['supervision'] == 0

    @pytest.mark.asyncio
    async def test_idempotent(self, db_session):
        first = await seed_demo_data(db_session)
        second = await seed_demo_data(db_session)

        assert first.id == second.id
        assert await db_session.scalar(select(func.count(Project.id))) == 1
        assert await db_session.scalar(select(func.count(User.id))) == len(DEMO_USERS)
