"""Subjects (e.g. Math, Science). Referenced by classes and by a teacher's main subject."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid

from app.db.session import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
