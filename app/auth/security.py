from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import bcrypt
from fastapi import Response
from jose import JWTError, jwt

from app.core.config import settings

SESSION_COOKIE_NAME = "jwt"


def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # In case the stored hash is invalid/corrupted
        return False


def create_access_token(user_id: UUID, expires_days: Optional[int] = None) -> str:
    if expires_days is None:
        expires_days = settings.access_token_expire_days

    expire = datetime.now(timezone.utc) + timedelta(days=expires_days)
    to_encode = {"userid": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[UUID]:
    """Return the user id carried by a valid token, None for anything else."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    user_id = payload.get("userid")
    if not user_id:
        return None
    try:
        return UUID(user_id)
    except ValueError:
        return None


def set_session_cookie(response: Response, user_id: UUID) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=create_access_token(user_id),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        max_age=settings.access_token_expire_days * 24 * 60 * 60,
    )


def clear_session_cookie(response: Response) -> None:
    # Sends an already-expired cookie so the browser drops the stored one.
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
