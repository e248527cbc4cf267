from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.security import hash_password
from app.core.enums import UserRole
from app.core.exceptions import Conflict, DuplicateEntity, NotFound, ServerError
from app.core.models import SchoolClass, Subject
from app.core.services import paginate

from .schemas import UserCreate, UserCreatedResponse, UserListResponse, UserResponse, UserUpdate


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateEntity("User already exists") from e
    except SQLAlchemyError as e:
        await db.rollback()
        raise ServerError() from e


async def _email_taken(db: AsyncSession, email: str, exclude_id: Optional[UUID] = None) -> bool:
    stmt = select(User.id).where(func.lower(User.email) == email)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.first() is not None


async def _check_references(
    db: AsyncSession,
    student_class_id: Optional[UUID],
    teacher_subject_id: Optional[UUID],
) -> None:
    if student_class_id is not None and not await db.get(SchoolClass, student_class_id):
        raise NotFound("Class not found")
    if teacher_subject_id is not None and not await db.get(Subject, teacher_subject_id):
        raise NotFound("Subject not found")


async def register_user(db: AsyncSession, payload: UserCreate) -> UserCreatedResponse:
    email = payload.email.strip().lower()
    if await _email_taken(db, email):
        raise DuplicateEntity("User already exists")
    await _check_references(db, payload.student_class_id, payload.teacher_subject_id)

    user = User(
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        role=payload.role.value,
        is_active=payload.is_active,
        student_class_id=payload.student_class_id,
        teacher_subject_id=payload.teacher_subject_id,
    )
    db.add(user)
    await _commit(db)
    await db.refresh(user)
    return UserCreatedResponse.model_validate(user)


async def get_all_users(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
) -> UserListResponse:
    """Filter by role and by a case-insensitive substring of name or email; newest first."""
    stmt = select(User)
    if role is not None:
        stmt = stmt.where(User.role == role.value)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    stmt = stmt.order_by(User.created_at.desc(), User.id)
    rows, pagination = await paginate(db, stmt, page, limit)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in rows],
        pagination=pagination,
    )


async def update_user(db: AsyncSession, user_id: UUID, payload: UserUpdate) -> UserResponse:
    user = await db.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    changes = payload.model_dump(exclude_unset=True)
    if "email" in changes:
        changes["email"] = changes["email"].strip().lower()
        if await _email_taken(db, changes["email"], exclude_id=user_id):
            raise DuplicateEntity("User already exists")
    await _check_references(db, changes.get("student_class_id"), changes.get("teacher_subject_id"))

    if "password" in changes:
        user.password_hash = hash_password(changes.pop("password"))
    if "role" in changes:
        changes["role"] = changes["role"].value
    if "name" in changes:
        changes["name"] = changes["name"].strip()
    for field, value in changes.items():
        setattr(user, field, value)

    await _commit(db)
    await db.refresh(user)
    return UserResponse.model_validate(user)


async def delete_user(db: AsyncSession, user_id: UUID) -> UserResponse:
    """Hard delete. Refused while the user is the class teacher of any class."""
    user = await db.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    teaching = await db.execute(
        select(SchoolClass.id).where(SchoolClass.class_teacher_id == user_id).limit(1)
    )
    if teaching.first():
        raise Conflict("User is the class teacher of a class; reassign it before deleting")

    deleted = UserResponse.model_validate(user)
    await db.delete(user)
    await _commit(db)
    return deleted
