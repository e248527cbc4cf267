from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import authorize
from app.core.enums import UserRole
from app.db.session import get_db

from .schemas import ActivityLogListResponse
from . import service

router = APIRouter(prefix="/api/activities", tags=["activities"])


@router.get(
    "",
    response_model=ActivityLogListResponse,
    dependencies=[Depends(authorize(UserRole.ADMIN, UserRole.TEACHER))],
)
async def list_activities(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> ActivityLogListResponse:
    """Audit trail, newest first."""
    return await service.get_all_activities(db, page=page, limit=limit)
