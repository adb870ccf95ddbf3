"""Timetable aggregate: one per class/section/academic year/term. Owns its periods."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from school_timetable.db.session import Base


class Timetable(Base):
    __tablename__ = "timetables"
    __table_args__ = (
        UniqueConstraint(
            "class_id", "section_id", "academic_year", "term",
            name="uq_timetable_key",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid(as_uuid=True), nullable=False)
    section_id = Column(Uuid(as_uuid=True), nullable=False)
    academic_year = Column(String(20), nullable=False)  # e.g. 2024-2025
    term = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    periods = relationship(
        "Period",
        back_populates="timetable",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
