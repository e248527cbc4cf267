from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.activities.audit_service import ActivityLogger, get_activity_logger
from app.auth.dependencies import get_current_user
from app.auth.rbac import authorize
from app.auth.schemas import CurrentUser, LoginRequest
from app.auth.security import clear_session_cookie, set_session_cookie
from app.auth.services import authenticate_user
from app.core.enums import UserRole
from app.core.exceptions import ServiceError
from app.core.schemas import MessageResponse
from app.db.session import get_db

from .schemas import UserCreate, UserCreatedResponse, UserListResponse, UserResponse, UserUpdate
from . import service

router = APIRouter(prefix="/api/users", tags=["users"])

staff_only = authorize(UserRole.ADMIN, UserRole.TEACHER)


@router.get("", response_model=UserListResponse, dependencies=[Depends(staff_only)])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[UserRole] = Query(None),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or email"),
    db: AsyncSession = Depends(get_db),
) -> UserListResponse:
    return await service.get_all_users(db, page=page, limit=limit, role=role, search=search)


@router.post("/register", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(staff_only),
    audit: ActivityLogger = Depends(get_activity_logger),
) -> UserCreatedResponse:
    """Create a user account. There is no self-registration; admins and teachers create accounts."""
    try:
        created = await service.register_user(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    background_tasks.add_task(audit.log_activity, current_user.id, f"Registered user {created.email}")
    return created


@router.post("/login", response_model=UserResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Check credentials and issue the session cookie."""
    try:
        user = await authenticate_user(db, payload.email, payload.password)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    set_session_cookie(response, user.id)
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
) -> MessageResponse:
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/profile", response_model=UserResponse)
async def get_user_profile(
    current_user: CurrentUser = Depends(get_current_user),
) -> UserResponse:
    return UserResponse.model_validate(current_user.model_dump())


@router.put("/update/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(staff_only),
    audit: ActivityLogger = Depends(get_activity_logger),
) -> UserResponse:
    try:
        updated = await service.update_user(db, user_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    background_tasks.add_task(audit.log_activity, current_user.id, f"Updated user {updated.email}")
    return updated


@router.delete("/delete/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(staff_only),
    audit: ActivityLogger = Depends(get_activity_logger),
) -> MessageResponse:
    try:
        deleted = await service.delete_user(db, user_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    background_tasks.add_task(audit.log_activity, current_user.id, f"Deleted user {deleted.email}")
    return MessageResponse(message="User deleted successfully")
