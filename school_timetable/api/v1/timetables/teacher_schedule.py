from typing import Iterable, Sequence
from uuid import UUID

from school_timetable.api.v1.time_slots.schemas import TimeSlotResponse
from school_timetable.core.enums import DAYS_OF_WEEK

from .grid import slot_sort_key
from .schemas import TeacherSchedule, TeacherScheduleEntry


def schedule_for(
    teacher_id: UUID,
    periods: Iterable,
    time_slots: Sequence[TimeSlotResponse],
    timetables: Iterable,
) -> TeacherSchedule:
    """
    Collate every period taught by teacher_id into a per-day schedule.
    All seven days are present (empty list when free); within a day entries are
    ordered by time slot start. Each entry carries the owning timetable's
    class, section, academic year and term.
    """
    slots = {s.id: s for s in time_slots}
    owners = {t.id: t for t in timetables}

    mine = [p for p in periods if p.teacher_id == teacher_id]
    mine.sort(key=lambda p: (p.day_of_week, slot_sort_key(slots[p.time_slot_id]), str(p.id)))

    schedule = {day: [] for day in DAYS_OF_WEEK}
    for p in mine:
        owner = owners[p.timetable_id]
        schedule[DAYS_OF_WEEK[p.day_of_week]].append(
            TeacherScheduleEntry(
                period_id=p.id,
                timetable_id=p.timetable_id,
                day_of_week=p.day_of_week,
                time_slot=slots[p.time_slot_id],
                subject_id=p.subject_id,
                class_id=owner.class_id,
                section_id=owner.section_id,
                academic_year=owner.academic_year,
                term=owner.term,
            )
        )
    return TeacherSchedule(teacher_id=teacher_id, schedule=schedule)
