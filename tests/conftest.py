"""Shared fixtures: a throwaway SQLite database per test and seeded facilities."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./court_booking_test.db")
os.environ.setdefault("HOLD_SWEEP_ENABLED", "false")

from datetime import datetime, timedelta
from decimal import Decimal

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from court_booking.core.database import get_db, init_db
from court_booking.main import app
from court_booking.models.court_config import CourtConfiguration
from court_booking.models.facility import Facility
from court_booking.models.sport import Sport


def slot(hour: int, minute: int = 0, hours: float = 1, days: int = 3):
    """A future window on a fixed day, facility wall clock."""
    day = (datetime.now() + timedelta(days=days)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    start = day.replace(hour=hour, minute=minute)
    return start, start + timedelta(hours=hours)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def sport(db):
    sport = Sport(name="Badminton", sport_type="badminton", emoji="🏸")
    db.add(sport)
    await db.commit()
    return sport


@pytest.fixture
async def facility(db):
    facility = Facility(
        owner_id="owner-1", name="Shuttle Arena", city="Pune", timezone="UTC", is_approved=True
    )
    db.add(facility)
    await db.commit()
    return facility


@pytest.fixture
async def court_config(db, facility, sport):
    config = CourtConfiguration(
        facility_id=facility.id,
        sport_id=sport.id,
        court_count=2,
        price_per_hour=Decimal("12.50"),
    )
    db.add(config)
    await db.commit()
    return config


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
