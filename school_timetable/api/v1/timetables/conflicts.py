"""
Decide whether a proposed period may be committed.

Two resources are protected:
- a timetable cell (timetable, day, time slot) holds at most one period;
- a teacher holds at most one period per (day, time slot) across all timetables.
Subjects are not a scarce resource: the same subject may run in two sections
at once under different teachers.
"""

from dataclasses import dataclass
from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_timetable.core.enums import ConflictOutcome
from school_timetable.core.models import Period


@dataclass(frozen=True)
class PeriodCandidate:
    timetable_id: UUID
    day_of_week: int
    time_slot_id: UUID
    teacher_id: UUID
    class_id: UUID
    section_id: UUID


CONFLICT_MESSAGES = {
    ConflictOutcome.SLOT_OCCUPIED: "This time slot is already occupied for this class and section on that day",
    ConflictOutcome.TEACHER_DOUBLE_BOOKED: "Teacher already has a period at this time slot on that day",
}


def decide_conflict(candidate: PeriodCandidate, committed_periods: Iterable) -> ConflictOutcome:
    """Membership test against committed periods; slot occupancy is reported before teacher overlap."""
    periods = list(committed_periods)
    for p in periods:
        if (
            p.timetable_id == candidate.timetable_id
            and p.day_of_week == candidate.day_of_week
            and p.time_slot_id == candidate.time_slot_id
        ):
            return ConflictOutcome.SLOT_OCCUPIED
    for p in periods:
        if (
            p.day_of_week == candidate.day_of_week
            and p.time_slot_id == candidate.time_slot_id
            and p.teacher_id == candidate.teacher_id
        ):
            return ConflictOutcome.TEACHER_DOUBLE_BOOKED
    return ConflictOutcome.OK


async def check_period_conflict(db: AsyncSession, candidate: PeriodCandidate) -> ConflictOutcome:
    """Same decision as decide_conflict, run as queries inside the caller's transaction."""
    occupied = await db.execute(
        select(Period.id).where(
            Period.timetable_id == candidate.timetable_id,
            Period.day_of_week == candidate.day_of_week,
            Period.time_slot_id == candidate.time_slot_id,
        ).limit(1)
    )
    if occupied.scalar_one_or_none() is not None:
        return ConflictOutcome.SLOT_OCCUPIED

    booked = await db.execute(
        select(Period.id).where(
            Period.day_of_week == candidate.day_of_week,
            Period.time_slot_id == candidate.time_slot_id,
            Period.teacher_id == candidate.teacher_id,
        ).limit(1)
    )
    if booked.scalar_one_or_none() is not None:
        return ConflictOutcome.TEACHER_DOUBLE_BOOKED

    return ConflictOutcome.OK


def conflict_from_integrity_error(exc: Exception) -> ConflictOutcome:
    """Map a unique-constraint violation on periods to the conflict it represents.

    PostgreSQL reports the constraint name; SQLite reports the column list.
    Returns OK when the error is not recognisably one of the two.
    """
    text = str(getattr(exc, "orig", exc))
    if "uq_period_slot" in text or "periods.timetable_id" in text:
        return ConflictOutcome.SLOT_OCCUPIED
    if "uq_period_teacher_slot" in text or "periods.teacher_id" in text:
        return ConflictOutcome.TEACHER_DOUBLE_BOOKED
    return ConflictOutcome.OK
