"""Create all tables for a fresh database. Migrations are managed outside this service."""
import asyncio

# Import all models so Base.metadata knows every table
from school_timetable.core import models  # noqa: F401
from school_timetable.db.session import Base, engine


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main() -> None:
    await init_db()
    await engine.dispose()
    print("✅ Tables created")


if __name__ == "__main__":
    asyncio.run(main())
