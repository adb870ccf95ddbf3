"""Class Teacher Assignment: grants ONE teacher management rights over ONE class-section's timetable.
Owned by master data; this service only reads it."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, UniqueConstraint, Uuid

from school_timetable.db.session import Base


class ClassTeacherAssignment(Base):
    __tablename__ = "class_teacher_assignments"
    __table_args__ = (
        UniqueConstraint(
            "teacher_id", "class_id", "section_id",
            name="uq_class_teacher_assignment",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(Uuid(as_uuid=True), nullable=False)
    class_id = Column(Uuid(as_uuid=True), nullable=False)
    section_id = Column(Uuid(as_uuid=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
