from datetime import datetime
from typing import NoReturn, Optional
import uuid

from fastapi import APIRouter, Depends, status, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import (
    DuplicateEmailError,
    InactiveUserError,
    InvalidCredentialsError,
    InvalidTokenError,
    StudioTrackError,
)
from app.core.logging_config import logger, set_user_id
from app.core.rate_limiter import limiter
from app.core.security import create_token_pair, decode_token, get_password_hash, verify_password
from app.models.organization import Organization
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.auth import (
    LoginResponse,
    RefreshTokenRequest,
    Token,
    UserLogin,
    UserRegister,
    UserResponse,
)

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _reject(event: str, request: Request, error: StudioTrackError,
            reason: str, email: Optional[str] = None) -> NoReturn:
    """Log a failed auth event and raise `error`"""
    logger.log_auth_event(
        event=event, success=False, user_email=email, reason=reason, client_ip=_client_ip(request)
    )
    raise error


async def _find_user(db: AsyncSession, **criteria) -> Optional[User]:
    return await db.scalar(select(User).filter_by(**criteria))


async def _organization_named(db: AsyncSession, name: str) -> Organization:
    """Existing organization with this name, or a new one"""
    organization = await db.scalar(select(Organization).where(Organization.name == name))
    if organization is None:
        organization = Organization(name=name)
        db.add(organization)
        await db.flush()
        logger.info(f"[Auth] Created organization {organization.name}")
    return organization


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Create an account, joining (or founding) the named studio. Rate limited: 3/min"""
    if await _find_user(db, email=user_data.email):
        _reject("register", request, DuplicateEmailError(user_data.email),
                "Email already registered", user_data.email)

    user = User(
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        full_name=user_data.full_name,
        role=user_data.role,
        organization=await _organization_named(db, user_data.organization_name),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.log_auth_event(
        event="register", success=True, user_email=user.email,
        client_ip=_client_ip(request), user_role=user.role.value
    )
    return user


@router.post("/login", response_model=LoginResponse)
@limiter.limit("5/minute")
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Exchange email/password for a token pair. Rate limited: 5/min"""
    user = await _find_user(db, email=credentials.email)

    if user is None or not verify_password(credentials.password, user.hashed_password):
        _reject("login", request, InvalidCredentialsError(), "Invalid credentials", credentials.email)
    if not user.is_active:
        _reject("login", request, InactiveUserError(), "Account inactive", credentials.email)

    user.last_login = datetime.utcnow()
    await db.commit()

    set_user_id(str(user.id))
    logger.log_auth_event(
        event="login", success=True, user_email=user.email,
        client_ip=_client_ip(request), user_role=user.role.value
    )

    return {
        **create_token_pair(str(user.id), user.email, user.role.value),
        "user": UserResponse.model_validate(user),
    }


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/refresh", response_model=Token)
async def refresh_token(
    token_request: RefreshTokenRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """New token pair from a valid refresh token"""
    try:
        payload = decode_token(token_request.refresh_token, expected_type="refresh")
        user_id = str(uuid.UUID(str(payload.get("sub"))))
    except (InvalidTokenError, ValueError) as e:
        _reject("token_refresh", request, InvalidTokenError("Invalid or expired refresh token"), str(e))

    user = await _find_user(db, id=user_id)
    if user is None:
        _reject("token_refresh", request, InvalidTokenError("User not found"), "User not found")
    if not user.is_active:
        _reject("token_refresh", request, InactiveUserError(), "Account inactive", user.email)

    logger.log_auth_event(
        event="token_refresh", success=True, user_email=user.email, client_ip=_client_ip(request)
    )
    return create_token_pair(str(user.id), user.email, user.role.value)
