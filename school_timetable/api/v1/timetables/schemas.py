from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from school_timetable.api.v1.time_slots.schemas import TimeSlotResponse
from school_timetable.core.enums import TimetableStatus


class TimetableKey(BaseModel):
    """Natural key of a timetable: one per class, section, academic year and term."""

    class_id: UUID
    section_id: UUID
    academic_year: str = Field(..., min_length=1, max_length=20, description="e.g. 2024-2025")
    term: str = Field(..., min_length=1, max_length=50, description="e.g. First Term")


class PeriodCreate(BaseModel):
    # day_of_week range is checked by the service (0=Sunday .. 6=Saturday).
    day_of_week: int
    time_slot_id: UUID
    subject_id: UUID
    teacher_id: UUID


class PeriodResponse(BaseModel):
    id: UUID
    timetable_id: UUID
    day_of_week: int
    day_name: str
    time_slot_id: UUID
    subject_id: UUID
    teacher_id: UUID
    class_id: UUID
    section_id: UUID
    time_slot: Optional[TimeSlotResponse] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TimetableResponse(BaseModel):
    id: UUID
    class_id: UUID
    section_id: UUID
    academic_year: str
    term: str
    status: TimetableStatus
    periods: List[PeriodResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- Grid projection ---


class GridCell(BaseModel):
    day_of_week: int
    day_name: str
    period: Optional[PeriodResponse] = None


class GridRow(BaseModel):
    time_slot: TimeSlotResponse
    is_break: bool
    break_type: Optional[str] = None
    cells: List[GridCell]  # always 7, Sunday..Saturday


class TimetableGrid(BaseModel):
    timetable_id: UUID
    class_id: UUID
    section_id: UUID
    academic_year: str
    term: str
    days: List[str]
    rows: List[GridRow]


# --- Teacher schedule ---


class TeacherScheduleEntry(BaseModel):
    period_id: UUID
    timetable_id: UUID
    day_of_week: int
    time_slot: TimeSlotResponse
    subject_id: UUID
    class_id: UUID
    section_id: UUID
    academic_year: str
    term: str


class TeacherSchedule(BaseModel):
    """Per-day schedule; every weekday key is present, in Sunday..Saturday order."""

    teacher_id: UUID
    schedule: Dict[str, List[TeacherScheduleEntry]]
