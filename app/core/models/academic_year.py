import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Index, String, Uuid, text

from app.db.session import Base


class AcademicYear(Base):
    """
    School academic year, e.g. "2024-2025". At most one row can be is_current = true;
    the partial unique index backs that up when two writers race.
    """

    __tablename__ = "academic_years"
    __table_args__ = (
        Index(
            "uq_academic_years_single_current",
            "is_current",
            unique=True,
            postgresql_where=text("is_current"),
            sqlite_where=text("is_current = 1"),
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    from_year = Column(Date, nullable=False)
    to_year = Column(Date, nullable=False)
    is_current = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
