"""Catalog-wide time slot (class period or break). Shared by every timetable."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Time, Uuid

from school_timetable.db.session import Base


class TimeSlot(Base):
    __tablename__ = "time_slots"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_break = Column(Boolean, nullable=False, default=False)
    break_type = Column(String(50), nullable=True)  # set only when is_break
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
