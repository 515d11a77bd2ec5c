import os

# Settings are read at import time; point them at a throwaway database first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ATTENDANCE_TIMEZONE", "Asia/Kolkata")

from datetime import datetime
from typing import AsyncGenerator, Callable, Dict
from zoneinfo import ZoneInfo

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.attendance_settings.schemas import AttendancePolicy
from app.api.v1.attendance_settings.service import AttendanceSettingsStore
from app.auth.models import User
from app.auth.security import create_access_token
from app.core.models import AttendanceLocation
from app.db.session import Base, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Connaught Place, New Delhi
HQ_LAT = 28.6139
HQ_LNG = 77.2090

IST = ZoneInfo("Asia/Kolkata")


def ist(year: int, month: int, day: int, hour: int, minute: int = 0) -> datetime:
    """Aware datetime on the operating timezone's wall clock."""
    return datetime(year, month, day, hour, minute, tzinfo=IST)


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test (StaticPool keeps the single connection alive)."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
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


@pytest.fixture(autouse=True)
def settings_store() -> AttendanceSettingsStore:
    """Each test starts with an unloaded settings cache."""
    store = AttendanceSettingsStore()
    app.state.attendance_settings_store = store
    return store


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def policy() -> AttendancePolicy:
    return AttendancePolicy(check_in_start_hour=10, check_in_end_hour=11, check_out_start_hour=19)


@pytest.fixture()
def zone() -> ZoneInfo:
    return IST


async def create_user(db: AsyncSession, email: str, role: str) -> User:
    user = User(full_name=email.split("@")[0].title(), email=email, role=role, status="ACTIVE")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture()
async def employee(db_session: AsyncSession) -> User:
    return await create_user(db_session, "priya@example.com", "employee")


@pytest.fixture()
async def other_employee(db_session: AsyncSession) -> User:
    return await create_user(db_session, "arjun@example.com", "employee")


@pytest.fixture()
async def admin(db_session: AsyncSession) -> User:
    return await create_user(db_session, "admin@example.com", "admin")


@pytest.fixture()
async def hq(db_session: AsyncSession) -> AttendanceLocation:
    location = AttendanceLocation(
        name="HQ",
        address="Connaught Place, New Delhi",
        latitude=HQ_LAT,
        longitude=HQ_LNG,
        radius=100,
        is_active=True,
    )
    db_session.add(location)
    await db_session.commit()
    await db_session.refresh(location)
    return location


@pytest.fixture()
def auth_headers() -> Callable[[User], Dict[str, str]]:
    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token(subject={"user_id": str(user.id), "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _headers
