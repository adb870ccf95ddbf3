"""Project a timetable's periods onto a time slot x weekday display grid."""

from typing import Optional, Sequence

from school_timetable.api.v1.time_slots.schemas import TimeSlotResponse
from school_timetable.core.enums import DAYS_OF_WEEK

from .schemas import GridCell, GridRow, TimetableGrid, TimetableResponse


def slot_sort_key(slot):
    # start_time first; end_time and id only make the order total for overlapping slots.
    return (slot.start_time, slot.end_time, str(slot.id))


def project_grid(
    timetable: Optional[TimetableResponse],
    time_slots: Sequence[TimeSlotResponse],
) -> Optional[TimetableGrid]:
    """
    Build one row per time slot (by start time) and one column per weekday (Sunday..Saturday).
    A cell holds the period at that (day, slot) or None. Break rows keep their break
    marker whether or not a period was placed on them.
    Returns None when there is no timetable, or nothing at all to show.
    """
    if timetable is None:
        return None
    if not timetable.periods and not time_slots:
        return None

    by_cell = {}
    for period in timetable.periods:
        by_cell.setdefault((period.day_of_week, period.time_slot_id), period)

    rows = []
    for slot in sorted(time_slots, key=slot_sort_key):
        cells = [
            GridCell(day_of_week=day, day_name=name, period=by_cell.get((day, slot.id)))
            for day, name in enumerate(DAYS_OF_WEEK)
        ]
        rows.append(
            GridRow(
                time_slot=slot,
                is_break=slot.is_break,
                break_type=slot.break_type,
                cells=cells,
            )
        )

    return TimetableGrid(
        timetable_id=timetable.id,
        class_id=timetable.class_id,
        section_id=timetable.section_id,
        academic_year=timetable.academic_year,
        term=timetable.term,
        days=list(DAYS_OF_WEEK),
        rows=rows,
    )
