"""Password hashing (bcrypt) and JWT access/refresh tokens (python-jose)"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from app.core.config import settings
from app.core.exceptions import InvalidTokenError

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))


def _encode(claims: Dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    payload = {**claims, "type": token_type, "exp": datetime.utcnow() + lifetime}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(data, "access", lifetime)


def create_refresh_token(data: Dict[str, Any]) -> str:
    return _encode(data, "refresh", timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def create_token_pair(user_id: str, email: str, role: str) -> Dict[str, str]:
    """Access + refresh tokens carrying the same identity claims"""
    claims = {"sub": user_id, "email": email, "role": role}
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
    }


def decode_token(token: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
    """Verified claims; InvalidTokenError on bad signature, expiry or wrong `type`"""
    try:
        claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise InvalidTokenError("Could not validate credentials")

    if expected_type is not None and claims.get("type") != expected_type:
        raise InvalidTokenError("Invalid token type")
    return claims
