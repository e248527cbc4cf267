from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, model_validator

from app.core.enums import UserRole
from app.core.schemas import Pagination


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole
    student_class_id: Optional[UUID] = Field(None, description="Class of a student")
    teacher_subject_id: Optional[UUID] = Field(None, description="Main subject of a teacher")
    is_active: bool = True


class UserUpdate(BaseModel):
    """Only the provided fields are changed. A new password is hashed before it is stored."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None
    student_class_id: Optional[UUID] = None
    teacher_subject_id: Optional[UUID] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "UserUpdate":
        # student_class_id and teacher_subject_id may be cleared with null; these may not.
        for field in ("name", "email", "password", "role", "is_active"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class UserResponse(BaseModel):
    """Public user fields. The password hash is never part of a response."""

    id: UUID
    name: str
    email: EmailStr
    role: UserRole
    is_active: bool
    student_class_id: Optional[UUID] = None
    teacher_subject_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserCreatedResponse(UserResponse):
    message: str = "User created successfully"


class UserListResponse(BaseModel):
    users: List[UserResponse]
    pagination: Pagination
