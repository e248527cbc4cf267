from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.activities.audit_service import ActivityLogger, get_activity_logger
from app.auth.rbac import authorize
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole
from app.core.exceptions import ServiceError
from app.core.schemas import MessageResponse
from app.db.session import get_db

from .schemas import ClassCreate, ClassListResponse, ClassResponse, ClassUpdate
from . import service

router = APIRouter(prefix="/api/classes", tags=["classes"])

admin_only = authorize(UserRole.ADMIN)


@router.get("", response_model=ClassListResponse, dependencies=[Depends(admin_only)])
async def list_classes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Case-insensitive match on class name"),
    db: AsyncSession = Depends(get_db),
) -> ClassListResponse:
    return await service.get_all_classes(db, page=page, limit=limit, search=search)


@router.post("/create", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
async def create_class(
    payload: ClassCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(admin_only),
    audit: ActivityLogger = Depends(get_activity_logger),
) -> ClassResponse:
    try:
        created = await service.create_class(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    background_tasks.add_task(audit.log_activity, current_user.id, f"Created new class: {created.name}")
    return created


@router.patch("/update/{class_id}", response_model=ClassResponse)
async def update_class(
    class_id: UUID,
    payload: ClassUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(admin_only),
    audit: ActivityLogger = Depends(get_activity_logger),
) -> ClassResponse:
    try:
        updated = await service.update_class(db, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    background_tasks.add_task(audit.log_activity, current_user.id, f"Updated class: {updated.name}")
    return updated


@router.delete("/delete/{class_id}", response_model=MessageResponse)
async def delete_class(
    class_id: UUID,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(admin_only),
    audit: ActivityLogger = Depends(get_activity_logger),
) -> MessageResponse:
    try:
        deleted = await service.delete_class(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    background_tasks.add_task(audit.log_activity, current_user.id, f"Deleted class: {deleted.name}")
    return MessageResponse(message="Class was removed")
