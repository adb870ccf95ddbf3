"""
Seed script to populate the time slot catalog with a default school day.

Slots that already exist with the same start/end are left untouched, so the
script can be re-run safely.
"""
import asyncio
from datetime import time
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_timetable.core.models import TimeSlot
from school_timetable.db.init_db import init_db
from school_timetable.db.session import AsyncSessionLocal


# (start, end, is_break, break_type)
DEFAULT_DAY: List[Tuple[time, time, bool, Optional[str]]] = [
    (time(8, 0), time(8, 45), False, None),
    (time(8, 45), time(9, 30), False, None),
    (time(9, 30), time(10, 15), False, None),
    (time(10, 15), time(10, 30), True, "SHORT BREAK"),
    (time(10, 30), time(11, 15), False, None),
    (time(11, 15), time(12, 0), False, None),
    (time(12, 0), time(12, 45), True, "LUNCH"),
    (time(12, 45), time(13, 30), False, None),
    (time(13, 30), time(14, 15), False, None),
]


async def seed_time_slots(db: AsyncSession) -> Tuple[int, int]:
    """Insert missing default slots. Returns (created, skipped)."""
    created = 0
    skipped = 0
    for start_time, end_time, is_break, break_type in DEFAULT_DAY:
        result = await db.execute(
            select(TimeSlot.id).where(
                TimeSlot.start_time == start_time,
                TimeSlot.end_time == end_time,
            ).limit(1)
        )
        if result.scalar_one_or_none() is not None:
            skipped += 1
            continue
        db.add(
            TimeSlot(
                start_time=start_time,
                end_time=end_time,
                is_break=is_break,
                break_type=break_type,
            )
        )
        created += 1
    await db.commit()
    return created, skipped


async def main() -> None:
    """Main entry point for the seed script."""
    await init_db()
    async with AsyncSessionLocal() as db:
        try:
            created, skipped = await seed_time_slots(db)
        except Exception as e:
            print(f"❌ Error seeding time slots: {e}")
            await db.rollback()
            raise

    print("=" * 60)
    print("Time Slot Seeding Summary")
    print("=" * 60)
    print(f"Time slots created: {created}")
    print(f"Time slots already present: {skipped}")
    print("=" * 60)
    print("✅ Seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(main())
