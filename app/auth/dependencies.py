from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyCookie
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.schemas import CurrentUser
from app.auth.security import SESSION_COOKIE_NAME, decode_access_token
from app.core.logging import get_logger
from app.db.session import get_db

logger = get_logger(__name__)

cookie_scheme = APIKeyCookie(name=SESSION_COOKIE_NAME, auto_error=False)


async def get_current_user(
    token: Optional[str] = Depends(cookie_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated user from the session cookie."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authorized, token failed",
    )

    user_id = decode_access_token(token)
    if user_id is None:
        logger.info("session_token_rejected")
        raise credentials_exception

    user = await db.get(User, user_id)
    if not user:
        logger.info("session_user_missing", user_id=str(user_id))
        raise credentials_exception

    return CurrentUser.model_validate(user)
