"""Timetable store: idempotent creation, period assignment and the scheduling invariants."""

from uuid import UUID, uuid4

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_timetable.api.v1.time_slots import service as time_slot_service
from school_timetable.api.v1.time_slots.schemas import TimeSlotCreate
from school_timetable.api.v1.timetables import service
from school_timetable.api.v1.timetables.schemas import PeriodCreate, TimetableKey
from school_timetable.core.enums import ConflictOutcome, TimetableStatus
from school_timetable.core.exceptions import ConflictError, NotFoundError, ValidationError
from school_timetable.core.models import Period, TimeSlot, Timetable

MONDAY = 1


def _key(class_id: UUID = None, section_id: UUID = None, term: str = "First Term") -> TimetableKey:
    return TimetableKey(
        class_id=class_id or uuid4(),
        section_id=section_id or uuid4(),
        academic_year="2024-2025",
        term=term,
    )


async def _slot(db: AsyncSession, start: str = "09:00", end: str = "09:45"):
    return await time_slot_service.create_time_slot(db, TimeSlotCreate(start_time=start, end_time=end))


async def _period_count(db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Period.id)))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_get_or_create_is_idempotent(db_session: AsyncSession) -> None:
    key = _key()
    first, created_first = await service.get_or_create_timetable(db_session, key)
    second, created_second = await service.get_or_create_timetable(db_session, key)

    assert created_first is True
    assert created_second is False
    assert first.id == second.id
    assert first.status == TimetableStatus.EMPTY
    assert first.periods == []

    result = await db_session.execute(select(func.count(Timetable.id)))
    assert result.scalar_one() == 1


@pytest.mark.asyncio
async def test_get_or_create_distinguishes_term(db_session: AsyncSession) -> None:
    class_id, section_id = uuid4(), uuid4()
    first, _ = await service.get_or_create_timetable(db_session, _key(class_id, section_id, "First Term"))
    second, _ = await service.get_or_create_timetable(db_session, _key(class_id, section_id, "Second Term"))
    assert first.id != second.id


@pytest.mark.asyncio
async def test_get_or_create_recovers_from_concurrent_insert(db_session: AsyncSession, monkeypatch) -> None:
    """A creator that lost the race returns the winner's timetable instead of failing."""
    key = _key()
    winner, _ = await service.get_or_create_timetable(db_session, key)

    real_load = service._load_by_key
    calls = {"n": 0}

    async def stale_first_read(db, k):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return await real_load(db, k)

    monkeypatch.setattr(service, "_load_by_key", stale_first_read)
    loser, created = await service.get_or_create_timetable(db_session, key)

    assert created is False
    assert loser.id == winner.id


@pytest.mark.asyncio
async def test_blank_key_parts_rejected(db_session: AsyncSession) -> None:
    key = TimetableKey(class_id=uuid4(), section_id=uuid4(), academic_year=" ", term="First Term")
    with pytest.raises(ValidationError):
        await service.get_or_create_timetable(db_session, key)


@pytest.mark.asyncio
async def test_lookup_by_key_absent_is_none(db_session: AsyncSession) -> None:
    assert await service.get_timetable_by_key(db_session, _key()) is None


@pytest.mark.asyncio
async def test_lookup_by_key_and_id(db_session: AsyncSession) -> None:
    key = _key()
    created, _ = await service.get_or_create_timetable(db_session, key)
    by_key = await service.get_timetable_by_key(db_session, key)
    by_id = await service.get_timetable_by_id(db_session, created.id)
    assert by_key.id == created.id
    assert by_id.id == created.id


@pytest.mark.asyncio
async def test_get_by_id_missing(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await service.get_timetable_by_id(db_session, uuid4())


@pytest.mark.asyncio
async def test_teacher_double_booked_across_timetables(db_session: AsyncSession) -> None:
    slot = await _slot(db_session)
    teacher_a = uuid4()
    class1_a, _ = await service.get_or_create_timetable(db_session, _key())
    class2_b, _ = await service.get_or_create_timetable(db_session, _key())

    period = await service.add_period(
        db_session,
        class1_a.id,
        PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=teacher_a),
    )
    assert period.day_name == "Monday"
    assert period.class_id == class1_a.class_id
    assert period.section_id == class1_a.section_id

    with pytest.raises(ConflictError) as exc_info:
        await service.add_period(
            db_session,
            class2_b.id,
            PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=teacher_a),
        )
    assert exc_info.value.kind is ConflictOutcome.TEACHER_DOUBLE_BOOKED
    assert exc_info.value.code == "TEACHER_DOUBLE_BOOKED"
    assert await _period_count(db_session) == 1


@pytest.mark.asyncio
async def test_slot_occupied_within_timetable(db_session: AsyncSession) -> None:
    slot = await _slot(db_session)
    timetable, _ = await service.get_or_create_timetable(db_session, _key())

    await service.add_period(
        db_session,
        timetable.id,
        PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=uuid4()),
    )
    with pytest.raises(ConflictError) as exc_info:
        await service.add_period(
            db_session,
            timetable.id,
            PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=uuid4()),
        )
    assert exc_info.value.kind is ConflictOutcome.SLOT_OCCUPIED
    assert await _period_count(db_session) == 1


@pytest.mark.asyncio
async def test_same_subject_in_two_sections_at_once(db_session: AsyncSession) -> None:
    slot = await _slot(db_session)
    math = uuid4()
    section_a, _ = await service.get_or_create_timetable(db_session, _key())
    section_b, _ = await service.get_or_create_timetable(db_session, _key())

    await service.add_period(
        db_session,
        section_a.id,
        PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=math, teacher_id=uuid4()),
    )
    await service.add_period(
        db_session,
        section_b.id,
        PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=math, teacher_id=uuid4()),
    )
    assert await _period_count(db_session) == 2


@pytest.mark.parametrize("day_of_week", [-1, 7, 42])
@pytest.mark.asyncio
async def test_day_of_week_out_of_range(db_session: AsyncSession, day_of_week: int) -> None:
    slot = await _slot(db_session)
    timetable, _ = await service.get_or_create_timetable(db_session, _key())
    with pytest.raises(ValidationError):
        await service.add_period(
            db_session,
            timetable.id,
            PeriodCreate(day_of_week=day_of_week, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=uuid4()),
        )


@pytest.mark.asyncio
async def test_add_period_missing_references(db_session: AsyncSession) -> None:
    slot = await _slot(db_session)
    timetable, _ = await service.get_or_create_timetable(db_session, _key())

    with pytest.raises(NotFoundError):
        await service.add_period(
            db_session,
            uuid4(),
            PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=uuid4()),
        )
    with pytest.raises(NotFoundError):
        await service.add_period(
            db_session,
            timetable.id,
            PeriodCreate(day_of_week=MONDAY, time_slot_id=uuid4(), subject_id=uuid4(), teacher_id=uuid4()),
        )


@pytest.mark.asyncio
async def test_delete_period_twice(db_session: AsyncSession) -> None:
    slot = await _slot(db_session)
    timetable, _ = await service.get_or_create_timetable(db_session, _key())
    period = await service.add_period(
        db_session,
        timetable.id,
        PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=uuid4()),
    )

    await service.delete_period(db_session, period.id)
    with pytest.raises(NotFoundError):
        await service.delete_period(db_session, period.id)


@pytest.mark.asyncio
async def test_change_is_delete_then_add(db_session: AsyncSession) -> None:
    slot = await _slot(db_session)
    timetable, _ = await service.get_or_create_timetable(db_session, _key())
    first = await service.add_period(
        db_session,
        timetable.id,
        PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=uuid4()),
    )
    await service.delete_period(db_session, first.id)

    replacement_teacher = uuid4()
    second = await service.add_period(
        db_session,
        timetable.id,
        PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=replacement_teacher),
    )
    assert second.id != first.id

    reloaded = await service.get_timetable_by_id(db_session, timetable.id)
    assert reloaded.status == TimetableStatus.POPULATED
    assert [p.teacher_id for p in reloaded.periods] == [replacement_teacher]


@pytest.mark.asyncio
async def test_timetable_periods_ordered_by_day_then_start(db_session: AsyncSession) -> None:
    late = await _slot(db_session, "11:00", "11:45")
    early = await _slot(db_session, "08:00", "08:45")
    timetable, _ = await service.get_or_create_timetable(db_session, _key())
    for day, slot in [(2, early), (1, late), (1, early)]:
        await service.add_period(
            db_session,
            timetable.id,
            PeriodCreate(day_of_week=day, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=uuid4()),
        )

    reloaded = await service.get_timetable_by_id(db_session, timetable.id)
    assert [(p.day_of_week, p.time_slot_id) for p in reloaded.periods] == [
        (1, early.id),
        (1, late.id),
        (2, early.id),
    ]
    assert reloaded.periods[0].time_slot.start_time == early.start_time


@pytest.mark.asyncio
async def test_storage_constraints_map_to_conflict_kinds(db_session: AsyncSession, monkeypatch) -> None:
    """When a racing insert slips past the application check, the unique constraints still decide."""
    slot = await _slot(db_session)
    teacher = uuid4()
    timetable, _ = await service.get_or_create_timetable(db_session, _key())
    other, _ = await service.get_or_create_timetable(db_session, _key())
    await service.add_period(
        db_session,
        timetable.id,
        PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=teacher),
    )

    async def check_saw_nothing(db, candidate):
        return ConflictOutcome.OK

    monkeypatch.setattr(service, "check_period_conflict", check_saw_nothing)

    with pytest.raises(ConflictError) as slot_exc:
        await service.add_period(
            db_session,
            timetable.id,
            PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=uuid4()),
        )
    assert slot_exc.value.kind is ConflictOutcome.SLOT_OCCUPIED

    with pytest.raises(ConflictError) as teacher_exc:
        await service.add_period(
            db_session,
            other.id,
            PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=teacher),
        )
    assert teacher_exc.value.kind is ConflictOutcome.TEACHER_DOUBLE_BOOKED

    assert await _period_count(db_session) == 1


@pytest.mark.asyncio
async def test_slot_deleted_during_add_is_not_found(db_session: AsyncSession, monkeypatch) -> None:
    """A time slot removed between the existence check and the insert is reported as missing."""
    slot = await _slot(db_session)
    timetable, _ = await service.get_or_create_timetable(db_session, _key())

    async def slot_removed_meanwhile(db, candidate):
        await db.execute(delete(TimeSlot).where(TimeSlot.id == candidate.time_slot_id))
        await db.commit()
        return ConflictOutcome.OK

    monkeypatch.setattr(service, "check_period_conflict", slot_removed_meanwhile)

    with pytest.raises(NotFoundError) as exc_info:
        await service.add_period(
            db_session,
            timetable.id,
            PeriodCreate(day_of_week=MONDAY, time_slot_id=slot.id, subject_id=uuid4(), teacher_id=uuid4()),
        )
    assert exc_info.value.message == "Time slot not found"
    assert await _period_count(db_session) == 0


@pytest.mark.asyncio
async def test_key_whitespace_names_the_same_timetable(db_session: AsyncSession) -> None:
    class_id, section_id = uuid4(), uuid4()
    first, created = await service.get_or_create_timetable(db_session, _key(class_id, section_id, "First Term"))
    padded = TimetableKey(class_id=class_id, section_id=section_id, academic_year="2024-2025 ", term=" First Term")
    second, created_again = await service.get_or_create_timetable(db_session, padded)

    assert created is True
    assert created_again is False
    assert second.id == first.id
    assert second.academic_year == "2024-2025"
    assert (await service.get_timetable_by_key(db_session, padded)).id == first.id

    result = await db_session.execute(select(func.count(Timetable.id)))
    assert result.scalar_one() == 1

@pytest.mark.asyncio
async def test_break_slot_assignment_is_allowed(db_session: AsyncSession) -> None:
    lunch = await time_slot_service.create_time_slot(
        db_session,
        TimeSlotCreate(start_time="12:00", end_time="12:45", is_break=True, break_type="LUNCH"),
    )
    timetable, _ = await service.get_or_create_timetable(db_session, _key())
    period = await service.add_period(
        db_session,
        timetable.id,
        PeriodCreate(day_of_week=MONDAY, time_slot_id=lunch.id, subject_id=uuid4(), teacher_id=uuid4()),
    )
    assert period.time_slot.is_break is True
