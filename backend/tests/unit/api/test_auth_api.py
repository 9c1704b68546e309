"""
Unit Tests for Authentication API Endpoints
"""
import pytest
from httpx import AsyncClient
from faker import Faker
from sqlalchemy import select

from app.models import Organization, User

fake = Faker()


def registration(**overrides) -> dict:
    data = {
        'full_name': fake.name(),
        'email': fake.unique.email(),
        'password': 'secret123',
        'organization_name': 'RAD Design Studio',
    }
    data.update(overrides)
    return data


class TestRegistration:
    """Test user registration endpoint"""

    @pytest.mark.asyncio
    async def test_register_new_user(self, client: AsyncClient):
        """Test successful registration with default role"""
        user_data = registration()

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 201
        data = response.json()
        assert data['email'] == user_data['email']
        assert data['role'] == 'designer'
        assert data['organization_name'] == 'RAD Design Studio'
        assert 'hashed_password' not in data

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, pm_user: User):
        """Test registration with existing email fails"""
        response = await client.post('/api/v1/auth/register', json=registration(email=pm_user.email))

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'USER_EXISTS'

    @pytest.mark.asyncio
    async def test_register_reuses_organization(self, client: AsyncClient, db_session):
        """Two registrations with the same studio name share one organization"""
        first = await client.post('/api/v1/auth/register', json=registration(role='pm'))
        second = await client.post('/api/v1/auth/register', json=registration(role='client'))

        assert first.json()['organization_id'] == second.json()['organization_id']
        orgs = (await db_session.execute(select(Organization))).scalars().all()
        assert len(orgs) == 1

    @pytest.mark.asyncio
    async def test_register_short_password(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/register', json=registration(password='123'))

        assert response.status_code == 422


class TestLogin:
    """Test login endpoint"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, designer_user: User):
        """Test successful login returns tokens and user"""
        response = await client.post(
            '/api/v1/auth/login',
            json={'email': designer_user.email, 'password': 'testpassword123'}
        )

        assert response.status_code == 200
        data = response.json()
        assert data['token_type'] == 'bearer'
        assert data['access_token'] and data['refresh_token']
        assert data['user']['role'] == 'designer'
        assert data['user']['last_login'] is not None

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, designer_user: User):
        response = await client.post(
            '/api/v1/auth/login',
            json={'email': designer_user.email, 'password': 'wrongpassword'}
        )

        assert response.status_code == 401
        assert response.json()['error']['message'] == 'Invalid email or password'

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, client: AsyncClient):
        response = await client.post(
            '/api/v1/auth/login',
            json={'email': 'nobody@rad.example', 'password': 'whatever'}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, client: AsyncClient, make_user):
        from app.models import UserRole

        user = await make_user(UserRole.DESIGNER, is_active=False)
        response = await client.post(
            '/api/v1/auth/login',
            json={'email': user.email, 'password': 'testpassword123'}
        )

        assert response.status_code == 403


class TestTokens:
    """Test /me and /refresh"""

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, pm_user: User, pm_headers):
        response = await client.get('/api/v1/auth/me', headers=pm_headers)

        assert response.status_code == 200
        assert response.json()['id'] == pm_user.id

    @pytest.mark.asyncio
    async def test_me_unauthenticated(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me')

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_invalid_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh(self, client: AsyncClient, designer_user: User):
        login = await client.post(
            '/api/v1/auth/login',
            json={'email': designer_user.email, 'password': 'testpassword123'}
        )

        response = await client.post(
            '/api/v1/auth/refresh',
            json={'refresh_token': login.json()['refresh_token']}
        )

        assert response.status_code == 200
        assert response.json()['access_token']

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, client: AsyncClient, designer_user: User):
        login = await client.post(
            '/api/v1/auth/login',
            json={'email': designer_user.email, 'password': 'testpassword123'}
        )

        response = await client.post(
            '/api/v1/auth/refresh',
            json={'refresh_token': login.json()['access_token']}
        )

        assert response.status_code == 401
