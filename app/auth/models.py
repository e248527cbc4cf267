import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, Uuid

from app.db.session import Base


class User(Base):
    """Admin, teacher or student account. Email is unique across the school."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    # admin | teacher | student (see app.core.enums.UserRole)
    role = Column(String(20), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    # classes.class_teacher_id points back at users, so this side is added after both tables exist.
    student_class_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("classes.id", ondelete="SET NULL", use_alter=True, name="fk_users_student_class_id"),
        nullable=True,
    )
    teacher_subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
