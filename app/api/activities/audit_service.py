"""
Audit trail writer. Called after a mutation has been committed; never raises to its caller.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.logging import get_logger
from app.core.models import ActivityLog
from app.db.session import AsyncSessionLocal

logger = get_logger(__name__)


class ActivityLogger:
    """Best-effort sink for ActivityLog rows.

    Each entry is written on a session of its own so that a failure here can
    never roll back or fail the request that triggered it. Routers schedule
    ``log_activity`` as a FastAPI background task, which runs once the
    response has been sent. Delivery is not guaranteed.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def log_activity(
        self,
        user_id: Optional[UUID],
        action: str,
        details: Optional[str] = None,
    ) -> None:
        try:
            async with self._session_factory() as session:
                session.add(
                    ActivityLog(
                        user_id=user_id,
                        action=action,
                        details=details,
                        created_at=datetime.utcnow(),
                    )
                )
                await session.commit()
        except Exception:
            logger.exception("activity_log_failed", user_id=str(user_id), action=action)


def get_activity_logger() -> ActivityLogger:
    return ActivityLogger(AsyncSessionLocal)
