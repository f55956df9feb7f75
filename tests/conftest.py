import os
from typing import AsyncGenerator

# Settings require DATABASE_URL at import time; tests bind their own engine below.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from academic_records.api.v1.students import service as student_service
from academic_records.api.v1.students.schemas import StudentCreate
from academic_records.api.v1.subjects import service as subject_service
from academic_records.api.v1.subjects.schemas import SubjectCreate
from academic_records.db.session import Base, enable_sqlite_foreign_keys, get_db
from academic_records.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test, with foreign keys enforced."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override the FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_student(db_session: AsyncSession):
    async def _make(name: str = "Asha Rao", class_name: str = "10", section: str = "A"):
        return await student_service.create_student(
            db_session, StudentCreate(name=name, class_name=class_name, section=section)
        )

    return _make


@pytest.fixture()
def make_subject(db_session: AsyncSession):
    async def _make(name: str, code: str, max_marks: int = 200):
        return await subject_service.create_subject(
            db_session, SubjectCreate(name=name, code=code, max_marks=max_marks)
        )

    return _make
