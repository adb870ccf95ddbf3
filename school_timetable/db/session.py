from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from school_timetable.core.config import settings


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores FOREIGN KEY clauses unless enabled on every connection."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    kwargs = {"echo": echo, "future": True}
    if not database_url.startswith("sqlite"):
        # pool_pre_ping: check connection is alive before use.
        # pool_recycle: discard connections after this many seconds to avoid stale connections.
        kwargs.update(pool_pre_ping=True, pool_recycle=300)
    engine = create_async_engine(database_url, **kwargs)
    enable_sqlite_foreign_keys(engine)
    return engine


engine = build_engine(settings.database_url, echo=settings.sql_echo)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session
