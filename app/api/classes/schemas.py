from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.core.schemas import Pagination


class ClassCreate(BaseModel):
    """Class name must be unique within the academic year."""

    name: str = Field(..., min_length=1, max_length=50, description="e.g. 10A")
    academic_year_id: UUID
    class_teacher_id: UUID
    capacity: int = Field(40, ge=1)


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    academic_year_id: Optional[UUID] = None
    class_teacher_id: Optional[UUID] = None
    capacity: Optional[int] = Field(None, ge=1)
    subject_ids: Optional[List[UUID]] = Field(None, description="Replaces the class subject list")
    student_ids: Optional[List[UUID]] = Field(None, description="Replaces the class student list")


class AcademicYearRef(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True


class UserRef(BaseModel):
    id: UUID
    name: str
    email: EmailStr

    class Config:
        from_attributes = True


class SubjectRef(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True


class ClassResponse(BaseModel):
    id: UUID
    name: str
    academic_year: AcademicYearRef
    class_teacher: UserRef
    subjects: List[SubjectRef] = []
    students: List[UserRef] = []
    capacity: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ClassListResponse(BaseModel):
    classes: List[ClassResponse]
    pagination: Pagination
