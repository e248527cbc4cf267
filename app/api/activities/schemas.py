from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from app.core.enums import UserRole
from app.core.schemas import Pagination


class ActivityActor(BaseModel):
    id: UUID
    name: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True


class ActivityLogResponse(BaseModel):
    id: UUID
    # None once the acting user has been deleted
    user: Optional[ActivityActor] = None
    action: str
    details: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ActivityLogListResponse(BaseModel):
    logs: List[ActivityLogResponse]
    pagination: Pagination
