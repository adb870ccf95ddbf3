import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_timetable.core.enums import DAYS_OF_WEEK, ConflictOutcome, TimetableStatus
from school_timetable.core.exceptions import ConflictError, NotFoundError, ValidationError
from school_timetable.core.models import Period, TimeSlot, Timetable

from school_timetable.api.v1.time_slots import service as time_slot_service
from school_timetable.api.v1.time_slots.schemas import TimeSlotResponse

from .conflicts import (
    CONFLICT_MESSAGES,
    PeriodCandidate,
    check_period_conflict,
    conflict_from_integrity_error,
)
from .grid import project_grid, slot_sort_key
from .schemas import (
    PeriodCreate,
    PeriodResponse,
    TeacherSchedule,
    TimetableGrid,
    TimetableKey,
    TimetableResponse,
)
from .teacher_schedule import schedule_for

logger = logging.getLogger(__name__)


def _period_to_response(p: Period, time_slot: Optional[TimeSlot] = None) -> PeriodResponse:
    return PeriodResponse(
        id=p.id,
        timetable_id=p.timetable_id,
        day_of_week=p.day_of_week,
        day_name=DAYS_OF_WEEK[p.day_of_week],
        time_slot_id=p.time_slot_id,
        subject_id=p.subject_id,
        teacher_id=p.teacher_id,
        class_id=p.class_id,
        section_id=p.section_id,
        time_slot=TimeSlotResponse.model_validate(time_slot) if time_slot is not None else None,
        created_at=p.created_at,
    )


def _to_response(t: Timetable) -> TimetableResponse:
    """Requires periods (and their time slots) to be loaded."""
    periods = sorted(
        t.periods,
        key=lambda p: (p.day_of_week, slot_sort_key(p.time_slot), str(p.id)),
    )
    return TimetableResponse(
        id=t.id,
        class_id=t.class_id,
        section_id=t.section_id,
        academic_year=t.academic_year,
        term=t.term,
        status=TimetableStatus.POPULATED if periods else TimetableStatus.EMPTY,
        periods=[_period_to_response(p, p.time_slot) for p in periods],
        created_at=t.created_at,
    )


def _with_periods(stmt):
    return stmt.options(
        selectinload(Timetable.periods).selectinload(Period.time_slot)
    ).execution_options(populate_existing=True)


def _normalize_key(key: TimetableKey) -> TimetableKey:
    """Strip surrounding whitespace so "2024-2025" and "2024-2025 " name the same timetable."""
    academic_year = key.academic_year.strip()
    term = key.term.strip()
    if not academic_year:
        raise ValidationError("academic_year is required")
    if not term:
        raise ValidationError("term is required")
    return key.model_copy(update={"academic_year": academic_year, "term": term})


async def _load_by_key(db: AsyncSession, key: TimetableKey) -> Optional[Timetable]:
    result = await db.execute(
        _with_periods(
            select(Timetable).where(
                Timetable.class_id == key.class_id,
                Timetable.section_id == key.section_id,
                Timetable.academic_year == key.academic_year,
                Timetable.term == key.term,
            )
        )
    )
    return result.scalar_one_or_none()


async def _load_by_id(db: AsyncSession, timetable_id: UUID) -> Optional[Timetable]:
    result = await db.execute(_with_periods(select(Timetable).where(Timetable.id == timetable_id)))
    return result.scalar_one_or_none()


async def get_or_create_timetable(
    db: AsyncSession,
    key: TimetableKey,
) -> Tuple[TimetableResponse, bool]:
    """Return the timetable for key, creating an empty one if needed. Second item is True if created.

    The unique constraint on the key decides concurrent creations: the loser
    rolls back and returns the winner's row.
    """
    key = _normalize_key(key)
    existing = await _load_by_key(db, key)
    if existing:
        return _to_response(existing), False

    obj = Timetable(
        class_id=key.class_id,
        section_id=key.section_id,
        academic_year=key.academic_year,
        term=key.term,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await _load_by_key(db, key)
        if existing is None:
            raise
        logger.warning(
            "Timetable for class %s section %s (%s, %s) was created concurrently; using %s",
            key.class_id, key.section_id, key.academic_year, key.term, existing.id,
        )
        return _to_response(existing), False

    logger.info(
        "Timetable %s created for class %s section %s (%s, %s)",
        obj.id, key.class_id, key.section_id, key.academic_year, key.term,
    )
    created = await _load_by_id(db, obj.id)
    return _to_response(created), True


async def get_timetable_by_key(db: AsyncSession, key: TimetableKey) -> Optional[TimetableResponse]:
    """Absence is a normal outcome: the caller may choose to create one."""
    key = _normalize_key(key)
    obj = await _load_by_key(db, key)
    return _to_response(obj) if obj else None


async def get_timetable_by_id(db: AsyncSession, timetable_id: UUID) -> TimetableResponse:
    obj = await _load_by_id(db, timetable_id)
    if not obj:
        raise NotFoundError("Timetable not found")
    return _to_response(obj)


async def add_period(
    db: AsyncSession,
    timetable_id: UUID,
    payload: PeriodCreate,
) -> PeriodResponse:
    """Schedule a subject and teacher into one (day, time slot) cell of a timetable.

    The conflict check and the insert run in one transaction. The unique
    constraints on periods reject a racing insert that slipped past the
    check; that failure is reported as the same conflict kind.
    """
    if not 0 <= payload.day_of_week <= 6:
        raise ValidationError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")

    timetable = await db.get(Timetable, timetable_id)
    if not timetable:
        raise NotFoundError("Timetable not found")
    slot = await db.get(TimeSlot, payload.time_slot_id)
    if not slot:
        raise NotFoundError("Time slot not found")

    candidate = PeriodCandidate(
        timetable_id=timetable.id,
        day_of_week=payload.day_of_week,
        time_slot_id=slot.id,
        teacher_id=payload.teacher_id,
        class_id=timetable.class_id,
        section_id=timetable.section_id,
    )
    outcome = await check_period_conflict(db, candidate)
    if outcome is not ConflictOutcome.OK:
        logger.info(
            "Period rejected for timetable %s (%s, slot %s, teacher %s): %s",
            candidate.timetable_id, DAYS_OF_WEEK[candidate.day_of_week],
            candidate.time_slot_id, candidate.teacher_id, outcome.value,
        )
        raise ConflictError(outcome, CONFLICT_MESSAGES[outcome])

    if slot.is_break:
        logger.warning(
            "Period on break slot %s (%s) in timetable %s",
            slot.id, slot.break_type, candidate.timetable_id,
        )

    obj = Period(
        timetable_id=candidate.timetable_id,
        day_of_week=candidate.day_of_week,
        time_slot_id=candidate.time_slot_id,
        subject_id=payload.subject_id,
        teacher_id=candidate.teacher_id,
        class_id=candidate.class_id,
        section_id=candidate.section_id,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        outcome = conflict_from_integrity_error(exc)
        if outcome is ConflictOutcome.OK:
            await _ensure_period_targets_exist(db, candidate)
            outcome = await check_period_conflict(db, candidate)
        if outcome is ConflictOutcome.OK:
            raise
        logger.warning(
            "Concurrent period insert for timetable %s (%s, slot %s) rejected by storage: %s",
            candidate.timetable_id, DAYS_OF_WEEK[candidate.day_of_week],
            candidate.time_slot_id, outcome.value,
        )
        raise ConflictError(outcome, CONFLICT_MESSAGES[outcome])

    logger.info(
        "Period %s added to timetable %s (%s, slot %s, teacher %s)",
        obj.id, candidate.timetable_id, DAYS_OF_WEEK[candidate.day_of_week],
        candidate.time_slot_id, candidate.teacher_id,
    )
    return _period_to_response(obj, slot)


async def _row_exists(db: AsyncSession, model, row_id: UUID) -> bool:
    result = await db.execute(select(model.id).where(model.id == row_id))
    return result.scalar_one_or_none() is not None


async def _ensure_period_targets_exist(db: AsyncSession, candidate: PeriodCandidate) -> None:
    """Raise NotFoundError when the timetable or time slot was deleted while the period was being added."""
    if not await _row_exists(db, Timetable, candidate.timetable_id):
        raise NotFoundError("Timetable not found")
    if not await _row_exists(db, TimeSlot, candidate.time_slot_id):
        logger.warning(
            "Time slot %s was deleted while a period was being added to timetable %s",
            candidate.time_slot_id, candidate.timetable_id,
        )
        raise NotFoundError("Time slot not found")


async def get_period(db: AsyncSession, period_id: UUID) -> PeriodResponse:
    obj = await db.get(Period, period_id)
    if not obj:
        raise NotFoundError("Period not found")
    slot = await db.get(TimeSlot, obj.time_slot_id)
    return _period_to_response(obj, slot)


async def delete_period(db: AsyncSession, period_id: UUID) -> None:
    """Hard delete. A changed assignment is a delete followed by a fresh add_period."""
    obj = await db.get(Period, period_id)
    if not obj:
        raise NotFoundError("Period not found")
    timetable_id = obj.timetable_id
    await db.delete(obj)
    await db.commit()
    logger.info("Period %s deleted from timetable %s", period_id, timetable_id)


async def list_periods_for_teacher(db: AsyncSession, teacher_id: UUID) -> List[Period]:
    result = await db.execute(select(Period).where(Period.teacher_id == teacher_id))
    return list(result.scalars().all())


async def project_grid_for_timetable(db: AsyncSession, timetable_id: UUID) -> Optional[TimetableGrid]:
    timetable = await get_timetable_by_id(db, timetable_id)
    time_slots = await time_slot_service.list_time_slots(db)
    return project_grid(timetable, time_slots)


async def get_teacher_schedule(db: AsyncSession, teacher_id: UUID) -> TeacherSchedule:
    periods = await list_periods_for_teacher(db, teacher_id)
    timetables: List[Timetable] = []
    timetable_ids = {p.timetable_id for p in periods}
    if timetable_ids:
        result = await db.execute(select(Timetable).where(Timetable.id.in_(list(timetable_ids))))
        timetables = list(result.scalars().all())
    time_slots = await time_slot_service.list_time_slots(db)
    return schedule_for(teacher_id, periods, time_slots, timetables)
