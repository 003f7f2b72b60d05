"""Tests for the pending-hold expiry sweep."""
from datetime import datetime, timedelta
from decimal import Decimal

from conftest import slot
from court_booking.models.booking import Booking, BookingStatus
from court_booking.services.scheduler import HoldExpiryScheduler


async def test_sweep_releases_only_expired_holds(db, court_config, session_factory):
    facility_id, sport_id = court_config.facility_id, court_config.sport_id
    start, end = slot(10)
    now = datetime.utcnow()

    def booking(court_number, status, hold_expires_at):
        return Booking(
            user_id="player-1",
            facility_id=facility_id,
            sport_id=sport_id,
            court_number=court_number,
            start_time=start,
            end_time=end,
            total_amount=Decimal("12.50"),
            status=status,
            hold_expires_at=hold_expires_at,
        )

    expired = booking(1, BookingStatus.PENDING.value, now - timedelta(minutes=1))
    held = booking(2, BookingStatus.PENDING.value, now + timedelta(minutes=10))
    db.add_all([expired, held])
    await db.commit()
    expired_id, held_id = expired.id, held.id

    sweeper = HoldExpiryScheduler(session_factory=session_factory)
    released = await sweeper.release_expired_holds(now=now)

    assert released == 1
    async with session_factory() as session:
        assert (await session.get(Booking, expired_id)).status == BookingStatus.CANCELLED.value
        assert (await session.get(Booking, held_id)).status == BookingStatus.PENDING.value

    assert await sweeper.release_expired_holds(now=now) == 0


async def test_sweep_failure_is_logged_not_raised(caplog):
    class BrokenLedger:
        async def release_expired_holds(self, db, now=None):
            raise RuntimeError("database went away")

    class FakeSession:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

        async def rollback(self):
            pass

    sweeper = HoldExpiryScheduler(ledger=BrokenLedger(), session_factory=FakeSession)

    assert await sweeper.release_expired_holds() == 0
    assert "database went away" in caplog.text


async def test_start_and_stop(session_factory):
    sweeper = HoldExpiryScheduler(session_factory=session_factory, interval_minutes=5)

    await sweeper.start()
    assert sweeper.running
    assert sweeper.scheduler.get_job("hold_expiry_job") is not None

    await sweeper.start()
    await sweeper.stop()
    assert not sweeper.running
