from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.models import ActivityLog
from app.core.services import paginate

from .schemas import ActivityLogListResponse, ActivityLogResponse


async def get_all_activities(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
) -> ActivityLogListResponse:
    """Newest first; the acting user (name, email, role) is loaded with each entry."""
    stmt = select(ActivityLog).order_by(ActivityLog.created_at.desc(), ActivityLog.id)
    rows, pagination = await paginate(db, stmt, page, limit)
    return ActivityLogListResponse(
        logs=[ActivityLogResponse.model_validate(log) for log in rows],
        pagination=pagination,
    )
