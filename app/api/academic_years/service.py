from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflict, DuplicateEntity, NotFound, ServerError, ServiceError
from app.core.logging import get_logger
from app.core.models import AcademicYear, SchoolClass
from app.core.services import paginate

from .schemas import AcademicYearCreate, AcademicYearListResponse, AcademicYearResponse, AcademicYearUpdate

logger = get_logger(__name__)

CURRENT_YEAR_RACE_MESSAGE = "Another academic year was marked as current at the same time; retry the request"
YEAR_IN_USE_MESSAGE = "Cannot delete an academic year that still has classes"


def _validate_dates(from_year: date, to_year: date) -> None:
    if to_year <= from_year:
        raise ServiceError("to_year must be after from_year", status.HTTP_400_BAD_REQUEST)


async def _commit(db: AsyncSession, on_integrity_error: ServiceError) -> None:
    """Commit the pending change. A constraint that only trips under a concurrent writer raises on_integrity_error."""
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise on_integrity_error from e
    except SQLAlchemyError as e:
        await db.rollback()
        raise ServerError() from e


async def _find_by_period(
    db: AsyncSession,
    from_year: date,
    to_year: date,
    exclude_id: Optional[UUID] = None,
) -> Optional[AcademicYear]:
    stmt = select(AcademicYear).where(
        AcademicYear.from_year == from_year,
        AcademicYear.to_year == to_year,
    )
    if exclude_id is not None:
        stmt = stmt.where(AcademicYear.id != exclude_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def create_academic_year(db: AsyncSession, payload: AcademicYearCreate) -> AcademicYearResponse:
    """Create academic year. If is_current, every existing year is unset in the same transaction."""
    _validate_dates(payload.from_year, payload.to_year)
    if await _find_by_period(db, payload.from_year, payload.to_year):
        raise DuplicateEntity("Academic year already exists")

    if payload.is_current:
        await db.execute(update(AcademicYear).values(is_current=False))

    ay = AcademicYear(
        name=payload.name.strip(),
        from_year=payload.from_year,
        to_year=payload.to_year,
        is_current=payload.is_current,
    )
    db.add(ay)
    await _commit(db, DuplicateEntity(CURRENT_YEAR_RACE_MESSAGE))
    await db.refresh(ay)
    if ay.is_current:
        logger.info("academic_year_set_current", academic_year_id=str(ay.id), name=ay.name)
    return AcademicYearResponse.model_validate(ay)


async def get_current_academic_year(db: AsyncSession) -> AcademicYearResponse:
    result = await db.execute(select(AcademicYear).where(AcademicYear.is_current.is_(True)))
    ay = result.scalars().first()
    if not ay:
        raise NotFound("No current academic year found")
    return AcademicYearResponse.model_validate(ay)


async def update_academic_year(
    db: AsyncSession,
    academic_year_id: UUID,
    payload: AcademicYearUpdate,
) -> AcademicYearResponse:
    """Apply the provided fields. Setting is_current unsets every other year in the same transaction.

    The target is resolved first so an unknown id never touches its siblings.
    """
    ay = await db.get(AcademicYear, academic_year_id)
    if not ay:
        raise NotFound("Academic year not found")

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        changes["name"] = changes["name"].strip()

    from_year = changes.get("from_year", ay.from_year)
    to_year = changes.get("to_year", ay.to_year)
    if "from_year" in changes or "to_year" in changes:
        _validate_dates(from_year, to_year)
        if await _find_by_period(db, from_year, to_year, exclude_id=academic_year_id):
            raise DuplicateEntity("Academic year already exists")

    if changes.get("is_current"):
        await db.execute(
            update(AcademicYear)
            .where(AcademicYear.id != academic_year_id)
            .values(is_current=False)
        )

    for field, value in changes.items():
        setattr(ay, field, value)
    await _commit(db, DuplicateEntity(CURRENT_YEAR_RACE_MESSAGE))
    await db.refresh(ay)
    if changes.get("is_current"):
        logger.info("academic_year_set_current", academic_year_id=str(ay.id), name=ay.name)
    return AcademicYearResponse.model_validate(ay)


async def get_all_academic_years(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
) -> AcademicYearListResponse:
    """Name search is a case-insensitive substring match; results sorted by name."""
    stmt = select(AcademicYear)
    if search:
        stmt = stmt.where(AcademicYear.name.ilike(f"%{search}%"))
    stmt = stmt.order_by(AcademicYear.name.asc(), AcademicYear.id)
    rows, pagination = await paginate(db, stmt, page, limit)
    return AcademicYearListResponse(
        years=[AcademicYearResponse.model_validate(ay) for ay in rows],
        pagination=pagination,
    )


async def delete_academic_year(db: AsyncSession, academic_year_id: UUID) -> AcademicYearResponse:
    """Delete a non-current year that no class belongs to. Returns the deleted record."""
    ay = await db.get(AcademicYear, academic_year_id)
    if not ay:
        raise NotFound("Academic year not found")
    if ay.is_current:
        raise Conflict("Cannot delete current academic year")

    in_use = await db.execute(
        select(SchoolClass.id).where(SchoolClass.academic_year_id == academic_year_id).limit(1)
    )
    if in_use.first():
        raise Conflict(YEAR_IN_USE_MESSAGE)

    deleted = AcademicYearResponse.model_validate(ay)
    await db.delete(ay)
    # A class inserted after the check above fails the foreign key instead.
    await _commit(db, Conflict(YEAR_IN_USE_MESSAGE))
    return deleted
