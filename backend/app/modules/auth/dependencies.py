from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import uuid

from app.core.database import get_db
from app.core.exceptions import InactiveUserError, InvalidTokenError, ProjectNotFoundError
from app.core.logging_config import set_project_id, set_user_id
from app.core.security import decode_token
from app.models.user import User
from app.models.project import Project

security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if credentials is None:
        raise InvalidTokenError("Not authenticated")

    payload = decode_token(credentials.credentials, expected_type="access")

    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError("Invalid token payload")

    # Validate user_id is a valid UUID format
    try:
        uuid.UUID(user_id)
    except ValueError:
        raise InvalidTokenError("Invalid user ID format")

    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()

    if not user:
        raise InvalidTokenError("User not found")

    if not user.is_active:
        raise InactiveUserError()

    # Rate limiter keys and log lines pick the user up from here
    request.state.user_id = str(user.id)
    set_user_id(str(user.id))

    return user


async def get_org_project(db: AsyncSession, project_id: str, user: User) -> Project:
    """
    Load a project inside the user's organization.
    Raises 404 for unknown ids and for other organizations' projects alike.
    """
    result = await db.execute(
        select(Project).where(
            Project.id == str(project_id),
            Project.organization_id == str(user.organization_id)
        )
    )
    project = result.scalar_one_or_none()

    if not project:
        raise ProjectNotFoundError(str(project_id))

    set_project_id(str(project.id))
    return project
