"""Classes per academic year (e.g. 10A in 2024-2025). Model named SchoolClass to avoid Python 'class' keyword."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class_subjects = Table(
    "class_subjects",
    Base.metadata,
    Column("class_id", Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True),
    Column("subject_id", Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
)

class_students = Table(
    "class_students",
    Base.metadata,
    Column("class_id", Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class SchoolClass(Base):
    """Class name is unique within an academic year."""

    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("name", "academic_year_id", name="uq_class_name_academic_year"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(50), nullable=False)
    academic_year_id = Column(Uuid(as_uuid=True), ForeignKey("academic_years.id"), nullable=False)
    class_teacher_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    capacity = Column(Integer, nullable=False, default=40)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    academic_year = relationship("AcademicYear", lazy="selectin")
    class_teacher = relationship("User", foreign_keys=[class_teacher_id], lazy="selectin")
    subjects = relationship("Subject", secondary=class_subjects, lazy="selectin")
    students = relationship("User", secondary=class_students, lazy="selectin")
