from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr

from app.core.enums import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class CurrentUser(BaseModel):
    """Authenticated caller, resolved from the session cookie once per request."""

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
