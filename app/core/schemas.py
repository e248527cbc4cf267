from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """Page metadata shared by every list endpoint. Pages are 1-based."""

    page: int = Field(..., ge=1, description="Current page")
    pages: int = Field(..., ge=0, description="Total pages, ceil(total / limit)")
    total: int = Field(..., ge=0, description="Total matching records")


class MessageResponse(BaseModel):
    message: str
