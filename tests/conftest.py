"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from collections.abc import AsyncGenerator
from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from student_tracker.db.models import Assignment, Note, PastPaper, Unit, User
from student_tracker.db.session import get_db, init_models
from student_tracker.main import app
from student_tracker.services import storage_service
from student_tracker.services.storage import LocalBackend
from tests.factories import DAY_0


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and asserting on it directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, tmp_path, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setattr(storage_service, "backend", LocalBackend(tmp_path))
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


# =============================================================================
# DATA BUILDERS
# =============================================================================


@pytest.fixture
def make_user(db: AsyncSession):
    async def _make_user(name: str, role: str = "student", **kwargs) -> User:
        user = User(
            name=name,
            admission_number=kwargs.pop("admission_number", f"ADM-{name.upper()}"),
            password_hash=kwargs.pop("password_hash", "not-a-real-hash"),
            role=role,
            **kwargs,
        )
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest.fixture
async def teacher(make_user) -> User:
    return await make_user("Teacher", role="teacher")


@pytest.fixture
async def unit(db: AsyncSession) -> Unit:
    unit = Unit(unit_code="MAT 2101", name="Calculus II", category="Mathematics")
    db.add(unit)
    await db.commit()
    return unit


@pytest.fixture
def make_assignment(db: AsyncSession, teacher: User, unit: Unit):
    async def _make_assignment(title: str, created_at: datetime = DAY_0, **kwargs) -> Assignment:
        assignment = Assignment(
            title=title,
            unit_code=kwargs.pop("unit_code", unit.unit_code),
            user_id=teacher.id,
            created_at=created_at,
            **kwargs,
        )
        db.add(assignment)
        await db.commit()
        return assignment

    return _make_assignment


@pytest.fixture
def make_note(db: AsyncSession, teacher: User, unit: Unit):
    async def _make_note(title: str, **kwargs) -> Note:
        note = Note(
            title=title,
            unit_code=kwargs.pop("unit_code", unit.unit_code),
            user_id=kwargs.pop("user_id", teacher.id),
            **kwargs,
        )
        db.add(note)
        await db.commit()
        return note

    return _make_note


@pytest.fixture
def make_paper(db: AsyncSession, teacher: User, unit: Unit):
    async def _make_paper(title: str, year: str = "2023", **kwargs) -> PastPaper:
        paper = PastPaper(
            title=title,
            year=year,
            unit_code=kwargs.pop("unit_code", unit.unit_code),
            user_id=kwargs.pop("user_id", teacher.id),
            **kwargs,
        )
        db.add(paper)
        await db.commit()
        return paper

    return _make_paper
