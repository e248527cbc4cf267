from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.security import verify_password
from app.core.exceptions import InvalidCredentials
from app.core.logging import get_logger

logger = get_logger(__name__)


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """Return the user owning these credentials.

    Unknown email and wrong password raise the same error so callers
    cannot probe which accounts exist.
    """
    result = await db.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
    user = result.scalar_one_or_none()
    if not user or not verify_password(password, user.password_hash):
        logger.info("login_failed")
        raise InvalidCredentials()
    return user
