"""
Unit Tests for Phase Endpoints
"""
import pytest
from httpx import AsyncClient

from app.models import Task, TaskStatus


def phase_by_key(project, key):
    return next(phase for phase in project.phases if phase.key == key)


class TestUpdatePhaseProgress:
    """POST /phases/{id}/update-progress"""

    @pytest.mark.asyncio
    async def test_recomputes_from_tasks(self, client: AsyncClient, db_session, project, designer_headers):
        design = phase_by_key(project, 'design')
        db_session.add_all([
            Task(project_id=project.id, phase_id=design.id, title='Develop 3D renderings',
                 status=TaskStatus.IN_PROGRESS, progress=40, order=1),
            Task(project_id=project.id, phase_id=design.id, title='Create material board',
                 status=TaskStatus.BACKLOG, progress=0, order=1),
            Task(project_id=project.id, phase_id=design.id, title='Design custom furniture',
                 status=TaskStatus.BACKLOG, progress=0, order=2),
        ])
        await db_session.commit()

        response = await client.post(f'/api/v1/phases/{design.id}/update-progress', headers=designer_headers)

        assert response.status_code == 200
        data = response.json()
        # (40 + 0 + 0) / 3 = 13.33
        assert data['phase']['progress'] == 13
        # 13 * 25 / 100 = 3.25
        assert data['project_progress'] == 3
        assert data['phase_status'] == 'on_track'

    @pytest.mark.asyncio
    async def test_phase_without_tasks_is_zero(self, client: AsyncClient, project, pm_headers):
        supervision = phase_by_key(project, 'supervision')

        response = await client.post(f'/api/v1/phases/{supervision.id}/update-progress', headers=pm_headers)

        assert response.status_code == 200
        assert response.json()['phase']['progress'] == 0
        assert response.json()['project_progress'] == 0

    @pytest.mark.asyncio
    async def test_logs_activity(self, client: AsyncClient, project, pm_headers):
        layout = phase_by_key(project, 'layout')
        await client.post(f'/api/v1/phases/{layout.id}/update-progress', headers=pm_headers)

        response = await client.get(f'/api/v1/projects/{project.id}/activity', headers=pm_headers)

        latest = response.json()[0]
        assert latest['action'] == 'UPDATE_PHASE_PROGRESS'
        assert latest['payload']['phase_name'] == 'Layout'
        assert latest['payload']['task_count'] == 0

    @pytest.mark.asyncio
    async def test_client_forbidden(self, client: AsyncClient, project, client_headers):
        layout = phase_by_key(project, 'layout')

        response = await client.post(f'/api/v1/phases/{layout.id}/update-progress', headers=client_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_other_organization_gets_404(self, client: AsyncClient, project, outsider_headers):
        layout = phase_by_key(project, 'layout')

        response = await client.post(f'/api/v1/phases/{layout.id}/update-progress', headers=outsider_headers)

        assert response.status_code == 404


class TestPhaseRevisions:
    """GET/POST /phases/{id}/revisions"""

    @pytest.mark.asyncio
    async def test_create_revision_starts_as_draft(self, client: AsyncClient, project, designer_user, designer_headers):
        design = phase_by_key(project, 'design')

        response = await client.post(
            f'/api/v1/phases/{design.id}/revisions',
            json={'label': 'D1', 'notes': 'Initial design concept'},
            headers=designer_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data['status'] == 'draft'
        assert data['submitted_at'] is None
        assert data['decided_at'] is None
        assert data['created_by_name'] == designer_user.full_name

    @pytest.mark.asyncio
    async def test_list_revisions(self, client: AsyncClient, project, designer_headers, client_headers):
        design = phase_by_key(project, 'design')
        for label in ('D1', 'D2'):
            await client.post(
                f'/api/v1/phases/{design.id}/revisions', json={'label': label}, headers=designer_headers
            )

        response = await client.get(f'/api/v1/phases/{design.id}/revisions', headers=client_headers)

        assert response.status_code == 200
        assert sorted(r['label'] for r in response.json()) == ['D1', 'D2']

    @pytest.mark.asyncio
    async def test_client_cannot_create(self, client: AsyncClient, project, client_headers):
        design = phase_by_key(project, 'design')

        response = await client.post(
            f'/api/v1/phases/{design.id}/revisions', json={'label': 'D1'}, headers=client_headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_empty_label_rejected(self, client: AsyncClient, project, designer_headers):
        design = phase_by_key(project, 'design')

        response = await client.post(
            f'/api/v1/phases/{design.id}/revisions', json={'label': ''}, headers=designer_headers
        )

        assert response.status_code == 422
