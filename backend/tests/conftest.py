"""
StudioTrack - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta
from typing import AsyncGenerator, Callable
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_LEVEL'] = 'WARNING'

from app.main import app
from app.core.database import Base, get_db
from app.core.security import get_password_hash, create_access_token
from app.models import Organization, User, UserRole
from app.schemas.project import ProjectCreate
from app.services.project_service import ProjectService

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def organization(db_session: AsyncSession) -> Organization:
    """The studio every role fixture belongs to"""
    org = Organization(name=fake.company())
    db_session.add(org)
    await db_session.commit()
    await db_session.refresh(org)
    return org


@pytest.fixture
def make_user(db_session: AsyncSession, organization: Organization) -> Callable:
    """Factory: make_user(role, org=None, **overrides) -> User"""
    async def _make_user(role: UserRole, org: Organization = None, **overrides) -> User:
        user = User(
            email=overrides.pop('email', fake.unique.email()),
            hashed_password=get_password_hash(overrides.pop('password', TEST_PASSWORD)),
            full_name=overrides.pop('full_name', fake.name()),
            role=role,
            organization=(org or organization),
            is_active=overrides.pop('is_active', True),
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(UserRole.ADMIN)


@pytest.fixture
async def pm_user(make_user) -> User:
    return await make_user(UserRole.PM)


@pytest.fixture
async def designer_user(make_user) -> User:
    return await make_user(UserRole.DESIGNER)


@pytest.fixture
async def client_user(make_user) -> User:
    return await make_user(UserRole.CLIENT)


@pytest.fixture
async def outsider_user(db_session: AsyncSession, make_user) -> User:
    """PM of a different studio"""
    other_org = Organization(name=f"{fake.company()} Interiors")
    db_session.add(other_org)
    await db_session.commit()
    return await make_user(UserRole.PM, org=other_org)


def headers_for(user: User) -> dict:
    """Generate authentication headers for a user"""
    token_data = {
        'sub': str(user.id),
        'email': user.email,
        'role': user.role.value
    }
    token = create_access_token(token_data)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers_for() -> Callable:
    """Header factory for users created inside a test"""
    return headers_for


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


@pytest.fixture
def pm_headers(pm_user: User) -> dict:
    return headers_for(pm_user)


@pytest.fixture
def designer_headers(designer_user: User) -> dict:
    return headers_for(designer_user)


@pytest.fixture
def client_headers(client_user: User) -> dict:
    return headers_for(client_user)


@pytest.fixture
def outsider_headers(outsider_user: User) -> dict:
    return headers_for(outsider_user)


@pytest.fixture
async def project(db_session: AsyncSession, pm_user: User):
    """Running project: started 10 days ago, due in 20 days, six default phases"""
    today = datetime.utcnow().replace(microsecond=0)
    data = ProjectCreate(
        name='Kamar Tidur Minimalis',
        client_name='Bapak John Doe',
        start_date=today - timedelta(days=10),
        end_date=today + timedelta(days=20),
        description=fake.text(max_nb_chars=120),
    )
    return await ProjectService(db_session).create_project(data, pm_user)
