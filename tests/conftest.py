from typing import AsyncGenerator, Callable, Dict, Optional
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from school_timetable.core import models  # noqa: F401
from school_timetable.core.config import settings
from school_timetable.db.session import Base, enable_sqlite_foreign_keys, get_db
from school_timetable.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite DB per test; StaticPool keeps every session on the same connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app, one DB session per request."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def make_headers() -> Callable[..., Dict[str, str]]:
    """Build an Authorization header the way the external auth service would sign it."""

    def _make(role: str = "ADMIN", teacher_id: Optional[UUID] = None, user_id: Optional[UUID] = None) -> Dict[str, str]:
        claims = {"sub": str(user_id or uuid4()), "role": role}
        if teacher_id is not None:
            claims["teacher_id"] = str(teacher_id)
        token = jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def admin_headers(make_headers) -> Dict[str, str]:
    return make_headers("ADMIN")
