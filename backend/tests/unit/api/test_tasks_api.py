"""
Unit Tests for Task Endpoints (kanban board)
"""
from datetime import datetime

import pytest
from httpx import AsyncClient

from app.schemas.project import ProjectCreate
from app.services.project_service import ProjectService


def phase_by_key(project, key):
    return next(phase for phase in project.phases if phase.key == key)


async def create_task(client, project, headers, **fields):
    body = {'title': 'Task', **fields}
    response = await client.post(f'/api/v1/projects/{project.id}/tasks', json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestTaskCreation:
    """POST /projects/{id}/tasks"""

    @pytest.mark.asyncio
    async def test_orders_within_column(self, client: AsyncClient, project, designer_headers):
        first = await create_task(client, project, designer_headers, title='Measure room')
        second = await create_task(client, project, designer_headers, title='Initial layout')
        other = await create_task(client, project, designer_headers, title='Palette', status='done')

        assert (first['order'], second['order']) == (1, 2)
        assert other['order'] == 1
        assert first['status'] == 'backlog'

    @pytest.mark.asyncio
    async def test_updates_phase_progress(self, client: AsyncClient, project, designer_headers):
        moodboard = phase_by_key(project, 'moodboard')
        await create_task(client, project, designer_headers, phase_id=moodboard.id, progress=100, status='done')
        await create_task(client, project, designer_headers, phase_id=moodboard.id, progress=50)

        detail = await client.get(f'/api/v1/projects/{project.id}', headers=designer_headers)

        phases = {p['key']: p for p in detail.json()['phases']}
        assert phases['moodboard']['progress'] == 75
        assert detail.json()['progress'] == 8

    @pytest.mark.asyncio
    async def test_phase_from_other_project(self, client: AsyncClient, db_session, project, pm_user, designer_headers):
        other = await ProjectService(db_session).create_project(
            ProjectCreate(name='Dapur Modern', client_name='Ibu Sari', start_date=datetime.utcnow()),
            pm_user
        )

        response = await client.post(
            f'/api/v1/projects/{project.id}/tasks',
            json={'title': 'Wrong phase', 'phase_id': other.phases[0].id},
            headers=designer_headers
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'PHASE_PROJECT_MISMATCH'

    @pytest.mark.asyncio
    async def test_assignee_outside_organization(self, client: AsyncClient, project, outsider_user, designer_headers):
        response = await client.post(
            f'/api/v1/projects/{project.id}/tasks',
            json={'title': 'Site visit', 'assignee_id': outsider_user.id},
            headers=designer_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_assignee_name(self, client: AsyncClient, project, designer_user, designer_headers):
        task = await create_task(client, project, designer_headers, assignee_id=designer_user.id)

        assert task['assignee_name'] == designer_user.full_name

    @pytest.mark.asyncio
    async def test_progress_out_of_range(self, client: AsyncClient, project, designer_headers):
        response = await client.post(
            f'/api/v1/projects/{project.id}/tasks',
            json={'title': 'Too much', 'progress': 120},
            headers=designer_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_client_forbidden(self, client: AsyncClient, project, client_headers):
        response = await client.post(
            f'/api/v1/projects/{project.id}/tasks', json={'title': 'Sneaky'}, headers=client_headers
        )

        assert response.status_code == 403


class TestTaskUpdates:
    """PATCH /tasks/{id}"""

    @pytest.mark.asyncio
    async def test_partial_update(self, client: AsyncClient, project, designer_headers):
        task = await create_task(client, project, designer_headers, title='Measure room')

        response = await client.patch(
            f"/api/v1/tasks/{task['id']}", json={'description': 'Laser measure'}, headers=designer_headers
        )

        assert response.status_code == 200
        assert response.json()['description'] == 'Laser measure'
        assert response.json()['title'] == 'Measure room'

    @pytest.mark.asyncio
    async def test_progress_change_recomputes_phase(self, client: AsyncClient, project, designer_headers):
        layout = phase_by_key(project, 'layout')
        task = await create_task(client, project, designer_headers, phase_id=layout.id, progress=10)

        await client.patch(f"/api/v1/tasks/{task['id']}", json={'progress': 90}, headers=designer_headers)

        detail = await client.get(f'/api/v1/projects/{project.id}', headers=designer_headers)
        phases = {p['key']: p for p in detail.json()['phases']}
        assert phases['layout']['progress'] == 90

    @pytest.mark.asyncio
    async def test_changing_phase_recomputes_both(self, client: AsyncClient, project, designer_headers):
        layout = phase_by_key(project, 'layout')
        design = phase_by_key(project, 'design')
        task = await create_task(client, project, designer_headers, phase_id=layout.id, progress=60)

        await client.patch(f"/api/v1/tasks/{task['id']}", json={'phase_id': design.id}, headers=designer_headers)

        detail = await client.get(f'/api/v1/projects/{project.id}', headers=designer_headers)
        phases = {p['key']: p for p in detail.json()['phases']}
        assert phases['layout']['progress'] == 0
        assert phases['design']['progress'] == 60

    @pytest.mark.asyncio
    async def test_status_change_goes_to_bottom(self, client: AsyncClient, project, designer_headers):
        await create_task(client, project, designer_headers, title='Already done', status='done')
        task = await create_task(client, project, designer_headers, title='Finishing')

        response = await client.patch(
            f"/api/v1/tasks/{task['id']}", json={'status': 'done'}, headers=designer_headers
        )

        assert response.json()['status'] == 'done'
        assert response.json()['order'] == 2

    @pytest.mark.asyncio
    async def test_null_title_rejected(self, client: AsyncClient, project, designer_headers):
        task = await create_task(client, project, designer_headers)

        response = await client.patch(f"/api/v1/tasks/{task['id']}", json={'title': None}, headers=designer_headers)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_move_requires_status_and_order(self, client: AsyncClient, project, designer_headers):
        task = await create_task(client, project, designer_headers)

        response = await client.patch(
            f"/api/v1/tasks/{task['id']}", json={'action': 'move', 'status': 'review'}, headers=designer_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_other_organization_gets_404(self, client: AsyncClient, project, designer_headers, outsider_headers):
        task = await create_task(client, project, designer_headers)

        response = await client.patch(
            f"/api/v1/tasks/{task['id']}", json={'progress': 50}, headers=outsider_headers
        )

        assert response.status_code == 404


class TestTaskMoves:
    """PATCH /tasks/{id} with action=move"""

    @pytest.mark.asyncio
    async def test_move_renumbers_destination(self, client: AsyncClient, project, designer_headers):
        review = [
            await create_task(client, project, designer_headers, title=f'Review {i}', status='review')
            for i in range(1, 4)
        ]
        moving = await create_task(client, project, designer_headers, title='Moving')

        response = await client.patch(
            f"/api/v1/tasks/{moving['id']}",
            json={'action': 'move', 'status': 'review', 'order': 2},
            headers=designer_headers
        )

        assert response.status_code == 200
        assert response.json()['status'] == 'review'
        assert response.json()['order'] == 2

        tasks = (await client.get(f'/api/v1/projects/{project.id}/tasks', headers=designer_headers)).json()
        column = [t['id'] for t in sorted(
            (t for t in tasks if t['status'] == 'review'), key=lambda t: t['order']
        )]
        assert column == [review[0]['id'], moving['id'], review[1]['id'], review[2]['id']]

    @pytest.mark.asyncio
    async def test_move_past_end_appends(self, client: AsyncClient, project, designer_headers):
        await create_task(client, project, designer_headers, status='done')
        moving = await create_task(client, project, designer_headers)

        response = await client.patch(
            f"/api/v1/tasks/{moving['id']}",
            json={'action': 'move', 'status': 'done', 'order': 99},
            headers=designer_headers
        )

        assert response.json()['order'] == 2

    @pytest.mark.asyncio
    async def test_move_logs_activity(self, client: AsyncClient, project, designer_headers):
        moving = await create_task(client, project, designer_headers)
        await client.patch(
            f"/api/v1/tasks/{moving['id']}",
            json={'action': 'move', 'status': 'in_progress', 'order': 1},
            headers=designer_headers
        )

        activity = (await client.get(f'/api/v1/projects/{project.id}/activity', headers=designer_headers)).json()

        moves = [entry for entry in activity if entry['action'] == 'MOVE_TASK']
        assert len(moves) == 1
        assert moves[0]['payload']['from_status'] == 'backlog'
        assert moves[0]['payload']['new_status'] == 'in_progress'
        assert moves[0]['payload']['new_order'] == 1


class TestTaskDeletion:

    @pytest.mark.asyncio
    async def test_delete_recomputes_phase(self, client: AsyncClient, project, designer_headers):
        moodboard = phase_by_key(project, 'moodboard')
        await create_task(client, project, designer_headers, phase_id=moodboard.id, progress=100)
        task = await create_task(client, project, designer_headers, phase_id=moodboard.id, progress=0)

        response = await client.delete(f"/api/v1/tasks/{task['id']}", headers=designer_headers)

        assert response.status_code == 200
        detail = await client.get(f'/api/v1/projects/{project.id}', headers=designer_headers)
        phases = {p['key']: p for p in detail.json()['phases']}
        assert phases['moodboard']['progress'] == 100
        assert len(detail.json()['tasks']) == 1

    @pytest.mark.asyncio
    async def test_delete_missing_task(self, client: AsyncClient, project, designer_headers):
        response = await client.delete('/api/v1/tasks/nonexistent-task-id', headers=designer_headers)

        assert response.status_code == 404
