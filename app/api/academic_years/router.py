from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.activities.audit_service import ActivityLogger, get_activity_logger
from app.auth.dependencies import get_current_user
from app.auth.rbac import authorize
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole
from app.core.exceptions import ServiceError
from app.core.schemas import MessageResponse
from app.db.session import get_db

from .schemas import AcademicYearCreate, AcademicYearListResponse, AcademicYearResponse, AcademicYearUpdate
from . import service

router = APIRouter(prefix="/api/academic-year", tags=["academic-year"])


@router.get(
    "",
    response_model=AcademicYearListResponse,
    dependencies=[Depends(authorize(UserRole.ADMIN))],
)
async def list_academic_years(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Case-insensitive match on name"),
    db: AsyncSession = Depends(get_db),
) -> AcademicYearListResponse:
    """List academic years sorted by name. Admin only."""
    return await service.get_all_academic_years(db, page=page, limit=limit, search=search)


@router.post(
    "/create",
    response_model=AcademicYearResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_academic_year(
    payload: AcademicYearCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(authorize(UserRole.ADMIN)),
    audit: ActivityLogger = Depends(get_activity_logger),
) -> AcademicYearResponse:
    """Create academic year. With is_current=true every other year stops being current. Admin only."""
    try:
        created = await service.create_academic_year(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    background_tasks.add_task(audit.log_activity, current_user.id, f"Created academic year {created.name}")
    return created


@router.get("/current", response_model=AcademicYearResponse)
async def get_current_academic_year(
    db: AsyncSession = Depends(get_db),
) -> AcademicYearResponse:
    """The academic year flagged as current. Public."""
    try:
        return await service.get_current_academic_year(db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/update/{academic_year_id}", response_model=AcademicYearResponse)
async def update_academic_year(
    academic_year_id: UUID,
    payload: AcademicYearUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    audit: ActivityLogger = Depends(get_activity_logger),
) -> AcademicYearResponse:
    """Update academic year. Any signed-in user; there is no role restriction on this route."""
    try:
        updated = await service.update_academic_year(db, academic_year_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    background_tasks.add_task(audit.log_activity, current_user.id, f"Updated academic year {updated.name}")
    return updated


@router.delete("/delete/{academic_year_id}", response_model=MessageResponse)
async def delete_academic_year(
    academic_year_id: UUID,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(authorize(UserRole.ADMIN)),
    audit: ActivityLogger = Depends(get_activity_logger),
) -> MessageResponse:
    """Delete a non-current academic year. Admin only."""
    try:
        deleted = await service.delete_academic_year(db, academic_year_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    background_tasks.add_task(audit.log_activity, current_user.id, f"Deleted academic year {deleted.name}")
    return MessageResponse(message="Academic year deleted successfully")
