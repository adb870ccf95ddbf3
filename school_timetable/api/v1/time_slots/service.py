import logging
import re
from datetime import time
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_timetable.core.exceptions import InUseError, NotFoundError, ValidationError
from school_timetable.core.models import Period, TimeSlot

from .schemas import TimeSlotCreate, TimeSlotResponse

logger = logging.getLogger(__name__)

TIME_24H_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_time_24(value: Union[str, time, None], field_name: str) -> time:
    """Parse a strict 24-hour HH:MM string (or pass a time through)."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str) or not TIME_24H_PATTERN.fullmatch(value):
        raise ValidationError(f"Invalid {field_name} format. Use 24-hour HH:MM, e.g. 09:00")
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def _normalize_break_type(is_break: bool, break_type: Optional[str]) -> Optional[str]:
    if not is_break:
        return None
    if break_type is None or not break_type.strip():
        raise ValidationError("break_type is required when is_break is true")
    return break_type.strip()


def _to_response(s: TimeSlot) -> TimeSlotResponse:
    return TimeSlotResponse(
        id=s.id,
        start_time=s.start_time,
        end_time=s.end_time,
        is_break=s.is_break,
        break_type=s.break_type,
        created_at=s.created_at,
    )


async def create_time_slot(db: AsyncSession, payload: TimeSlotCreate) -> TimeSlotResponse:
    start_time = parse_time_24(payload.start_time, "start_time")
    end_time = parse_time_24(payload.end_time, "end_time")
    if start_time >= end_time:
        raise ValidationError("start_time must be before end_time")
    break_type = _normalize_break_type(payload.is_break, payload.break_type)

    # Overlapping catalog entries are legal; conflicts only matter between periods.
    obj = TimeSlot(
        start_time=start_time,
        end_time=end_time,
        is_break=payload.is_break,
        break_type=break_type,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info(
        "Time slot %s created (%s-%s, break=%s)",
        obj.id, start_time.strftime("%H:%M"), end_time.strftime("%H:%M"), obj.is_break,
    )
    return _to_response(obj)


async def list_time_slots(db: AsyncSession, exclude_breaks: bool = False) -> List[TimeSlotResponse]:
    stmt = select(TimeSlot)
    if exclude_breaks:
        stmt = stmt.where(TimeSlot.is_break.is_(False))
    stmt = stmt.order_by(TimeSlot.start_time, TimeSlot.end_time, TimeSlot.id)
    result = await db.execute(stmt)
    return [_to_response(s) for s in result.scalars().all()]


async def get_time_slot(db: AsyncSession, time_slot_id: UUID) -> TimeSlotResponse:
    obj = await db.get(TimeSlot, time_slot_id)
    if not obj:
        raise NotFoundError("Time slot not found")
    return _to_response(obj)


async def delete_time_slot(db: AsyncSession, time_slot_id: UUID) -> None:
    """Delete a catalog entry that no period references.

    The reference check and the delete share one transaction; the RESTRICT
    foreign key on periods.time_slot_id rejects the delete if a period
    referencing the slot commits in between.
    """
    obj = await db.get(TimeSlot, time_slot_id)
    if not obj:
        raise NotFoundError("Time slot not found")

    in_use = await db.execute(select(Period.id).where(Period.time_slot_id == time_slot_id).limit(1))
    if in_use.scalar_one_or_none() is not None:
        raise InUseError("Time slot is used by one or more periods; delete those periods first")

    try:
        await db.delete(obj)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Time slot %s gained a period during deletion; delete rejected", time_slot_id)
        raise InUseError("Time slot is used by one or more periods; delete those periods first")
    logger.info("Time slot %s deleted", time_slot_id)
