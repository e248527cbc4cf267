from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.core.enums import UserRole
from app.core.exceptions import Conflict, DuplicateEntity, NotFound, ServerError
from app.core.models import AcademicYear, SchoolClass, Subject
from app.core.services import paginate

from .schemas import ClassCreate, ClassListResponse, ClassResponse, ClassUpdate

DUPLICATE_CLASS_MESSAGE = "Class with this name already exists for the specified academic year"


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateEntity(DUPLICATE_CLASS_MESSAGE) from e
    except SQLAlchemyError as e:
        await db.rollback()
        raise ServerError() from e


async def _load_class(db: AsyncSession, class_id: UUID) -> Optional[SchoolClass]:
    # populate_existing so relationships are reloaded after a commit on the same session
    result = await db.execute(
        select(SchoolClass)
        .where(SchoolClass.id == class_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _name_taken(
    db: AsyncSession,
    name: str,
    academic_year_id: UUID,
    exclude_id: Optional[UUID] = None,
) -> bool:
    stmt = select(SchoolClass.id).where(
        SchoolClass.name == name,
        SchoolClass.academic_year_id == academic_year_id,
    )
    if exclude_id is not None:
        stmt = stmt.where(SchoolClass.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.first() is not None


async def _ensure_academic_year(db: AsyncSession, academic_year_id: UUID) -> None:
    if not await db.get(AcademicYear, academic_year_id):
        raise NotFound("Academic year not found")


async def _ensure_teacher(db: AsyncSession, user_id: UUID) -> None:
    if not await db.get(User, user_id):
        raise NotFound("Class teacher not found")


async def _load_many(db: AsyncSession, model, ids: Sequence[UUID], label: str) -> List:
    unique_ids = list(dict.fromkeys(ids))
    if not unique_ids:
        return []
    result = await db.execute(select(model).where(model.id.in_(unique_ids)))
    rows = list(result.scalars().all())
    if len(rows) != len(unique_ids):
        raise NotFound(f"One or more {label} not found")
    return rows


async def create_class(db: AsyncSession, payload: ClassCreate) -> ClassResponse:
    name = payload.name.strip()
    await _ensure_academic_year(db, payload.academic_year_id)
    await _ensure_teacher(db, payload.class_teacher_id)
    if await _name_taken(db, name, payload.academic_year_id):
        raise DuplicateEntity(DUPLICATE_CLASS_MESSAGE)

    obj = SchoolClass(
        name=name,
        academic_year_id=payload.academic_year_id,
        class_teacher_id=payload.class_teacher_id,
        capacity=payload.capacity,
    )
    db.add(obj)
    await _commit(db)
    return ClassResponse.model_validate(await _load_class(db, obj.id))


async def get_all_classes(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
) -> ClassListResponse:
    stmt = select(SchoolClass)
    if search:
        stmt = stmt.where(SchoolClass.name.ilike(f"%{search}%"))
    stmt = stmt.order_by(SchoolClass.created_at.desc(), SchoolClass.id)
    rows, pagination = await paginate(db, stmt, page, limit)
    return ClassListResponse(
        classes=[ClassResponse.model_validate(c) for c in rows],
        pagination=pagination,
    )


async def update_class(db: AsyncSession, class_id: UUID, payload: ClassUpdate) -> ClassResponse:
    """Apply the provided fields; (name, academic year) must stay unique, excluding this class."""
    obj = await _load_class(db, class_id)
    if not obj:
        raise NotFound("Class not found")

    name = payload.name.strip() if payload.name is not None else obj.name
    academic_year_id = payload.academic_year_id or obj.academic_year_id
    if payload.academic_year_id is not None:
        await _ensure_academic_year(db, payload.academic_year_id)
    if await _name_taken(db, name, academic_year_id, exclude_id=class_id):
        raise DuplicateEntity(DUPLICATE_CLASS_MESSAGE)

    if payload.class_teacher_id is not None:
        await _ensure_teacher(db, payload.class_teacher_id)
        obj.class_teacher_id = payload.class_teacher_id
    if payload.capacity is not None:
        obj.capacity = payload.capacity
    if payload.subject_ids is not None:
        obj.subjects = await _load_many(db, Subject, payload.subject_ids, "subjects")
    if payload.student_ids is not None:
        students = await _load_many(db, User, payload.student_ids, "students")
        if any(s.role != UserRole.STUDENT.value for s in students):
            raise Conflict("Only students can be enrolled in a class")
        obj.students = students
    if len(obj.students) > obj.capacity:
        raise Conflict(f"Class capacity of {obj.capacity} exceeded")

    obj.name = name
    obj.academic_year_id = academic_year_id
    await _commit(db)
    return ClassResponse.model_validate(await _load_class(db, class_id))


async def delete_class(db: AsyncSession, class_id: UUID) -> ClassResponse:
    """Hard delete. Users whose student_class pointed here are left to the store's ON DELETE SET NULL."""
    obj = await _load_class(db, class_id)
    if not obj:
        raise NotFound("Class not found")
    deleted = ClassResponse.model_validate(obj)
    await db.delete(obj)
    await _commit(db)
    return deleted
