"""Period: one committed occupancy of a time slot on a weekday within a timetable.

class_id/section_id are copied from the owning timetable. The two unique
constraints are the storage-level backstop for the slot occupancy and teacher
non-overlap rules; their names are matched when mapping IntegrityError back to
a conflict kind.
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from school_timetable.db.session import Base


class Period(Base):
    __tablename__ = "periods"
    __table_args__ = (
        UniqueConstraint("timetable_id", "day_of_week", "time_slot_id", name="uq_period_slot"),
        UniqueConstraint("day_of_week", "time_slot_id", "teacher_id", name="uq_period_teacher_slot"),
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_period_day_of_week"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    timetable_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("timetables.id", ondelete="CASCADE"),
        nullable=False,
    )
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday .. 6=Saturday
    time_slot_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("time_slots.id", ondelete="RESTRICT"),
        nullable=False,
    )
    subject_id = Column(Uuid(as_uuid=True), nullable=False)
    teacher_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    class_id = Column(Uuid(as_uuid=True), nullable=False)
    section_id = Column(Uuid(as_uuid=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    timetable = relationship("Timetable", back_populates="periods")
    time_slot = relationship("TimeSlot")
