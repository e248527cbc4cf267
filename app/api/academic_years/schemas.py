from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.schemas import Pagination


class AcademicYearCreate(BaseModel):
    """Create academic year. The (from_year, to_year) pair must be unique."""

    name: str = Field(..., min_length=1, max_length=100, description="e.g. 2024-2025")
    from_year: date = Field(..., description="First day of the academic year")
    to_year: date = Field(..., description="Last day of the academic year (must be after from_year)")
    is_current: bool = Field(
        False,
        description="Make this the current year. Every other year stops being current.",
    )


class AcademicYearUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    from_year: Optional[date] = None
    to_year: Optional[date] = None
    is_current: Optional[bool] = None


class AcademicYearResponse(BaseModel):
    id: UUID
    name: str
    from_year: date
    to_year: date
    is_current: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AcademicYearListResponse(BaseModel):
    years: List[AcademicYearResponse]
    pagination: Pagination
