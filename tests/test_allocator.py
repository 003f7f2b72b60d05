"""Tests for court availability and lowest-number court assignment."""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from conftest import slot
from court_booking.core.exceptions import InvalidBookingRequest
from court_booking.models.booking import Booking, BookingStatus
from court_booking.services.allocator import (
    AvailabilityAllocator,
    availability_allocator,
    lowest_free_court,
    windows_overlap,
)
from court_booking.services.booking_ledger import BookingLedger


async def add_booking(db, facility_id, sport_id, court_number, start, end,
                      status=BookingStatus.CONFIRMED.value, hold_expires_at=None):
    booking = Booking(
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
    db.add(booking)
    await db.commit()
    return booking


@pytest.fixture
def keys(court_config):
    return court_config.facility_id, court_config.sport_id


def test_windows_overlap_is_half_open():
    ten, eleven, noon = (datetime(2030, 1, 7, h) for h in (10, 11, 12))
    half_past = datetime(2030, 1, 7, 10, 30)

    assert windows_overlap(ten, eleven, half_past, half_past + timedelta(hours=1))
    assert windows_overlap(ten, noon, half_past, eleven)
    assert not windows_overlap(ten, eleven, eleven, noon)
    assert not windows_overlap(eleven, noon, ten, eleven)


@pytest.mark.parametrize(
    "court_count, occupied, expected",
    [
        (3, set(), 1),
        (3, {1}, 2),
        (3, {2}, 1),
        (3, {1, 3}, 2),
        (3, {1, 2, 3}, None),
        (2, {3, 4}, 1),
    ],
)
def test_lowest_free_court(court_count, occupied, expected):
    assert lowest_free_court(court_count, occupied) == expected


async def test_first_booking_gets_court_one(db, keys):
    start, end = slot(10)

    assert await availability_allocator.get_available_court(db, *keys, start, end) == 1
    assert await availability_allocator.check_availability(db, *keys, start, end) == 2


async def test_second_booking_gets_court_two(db, keys):
    start, end = slot(10)
    await add_booking(db, *keys, 1, start, end)

    assert await availability_allocator.get_available_court(db, *keys, start, end) == 2
    assert await availability_allocator.check_availability(db, *keys, start, end) == 1


async def test_fully_booked_window_and_adjacent_window(db, keys):
    start, end = slot(10)
    await add_booking(db, *keys, 1, start, end)
    await add_booking(db, *keys, 2, start, end)

    assert await availability_allocator.get_available_court(db, *keys, start, end) is None
    assert await availability_allocator.check_availability(db, *keys, start, end) is None

    next_start, next_end = slot(11)
    assert await availability_allocator.get_available_court(db, *keys, next_start, next_end) == 1


async def test_partial_overlap_excludes_court(db, keys):
    start, end = slot(10)
    await add_booking(db, *keys, 1, start, end)
    half_past, half_past_end = slot(10, 30)

    assert await availability_allocator.check_availability(db, *keys, half_past, half_past_end) == 1
    assert await availability_allocator.get_available_court(db, *keys, half_past, half_past_end) == 2


async def test_court_with_several_short_bookings_counts_once(db, keys):
    first, first_end = slot(10, hours=0.5)
    second, second_end = slot(10, 30, hours=0.5)
    await add_booking(db, *keys, 1, first, first_end)
    await add_booking(db, *keys, 1, second, second_end)
    start, end = slot(10)

    assert await availability_allocator.check_availability(db, *keys, start, end) == 1


async def test_lowest_number_fills_gaps(db, keys):
    start, end = slot(10)
    await add_booking(db, *keys, 2, start, end)

    assert await availability_allocator.get_available_court(db, *keys, start, end) == 1


async def test_cancelled_booking_frees_court(db, keys):
    start, end = slot(10)
    booking = await add_booking(db, *keys, 1, start, end)
    assert await availability_allocator.get_available_court(db, *keys, start, end) == 2

    booking.status = BookingStatus.CANCELLED.value
    await db.commit()

    assert await availability_allocator.get_available_court(db, *keys, start, end) == 1


async def test_not_offered_returns_none(db, facility, sport):
    facility_id, sport_id = facility.id, sport.id
    start, end = slot(10)

    assert await availability_allocator.check_availability(db, facility_id, sport_id, start, end) is None
    assert await availability_allocator.get_available_court(db, facility_id, sport_id, start, end) is None


async def test_check_availability_is_repeatable(db, keys):
    start, end = slot(10)
    await add_booking(db, *keys, 1, start, end)

    counts = [
        await availability_allocator.check_availability(db, *keys, start, end)
        for _ in range(3)
    ]

    assert counts == [1, 1, 1]


async def test_pending_hold_blocks_until_it_expires(db, keys):
    start, end = slot(10)
    await add_booking(
        db, *keys, 1, start, end,
        status=BookingStatus.PENDING.value,
        hold_expires_at=datetime.utcnow() + timedelta(minutes=15),
    )
    await add_booking(
        db, *keys, 2, start, end,
        status=BookingStatus.PENDING.value,
        hold_expires_at=datetime.utcnow() - timedelta(minutes=1),
    )

    assert await availability_allocator.get_available_court(db, *keys, start, end) == 2


async def test_pending_holds_can_be_ignored_by_policy(db, keys):
    start, end = slot(10)
    await add_booking(
        db, *keys, 1, start, end,
        status=BookingStatus.PENDING.value,
        hold_expires_at=datetime.utcnow() + timedelta(minutes=15),
    )
    lenient = AvailabilityAllocator(ledger=BookingLedger(count_pending_holds=False))

    assert await lenient.check_availability(db, *keys, start, end) == 2
    assert await availability_allocator.check_availability(db, *keys, start, end) == 1


async def test_court_beyond_current_count_is_ignored(db, keys):
    start, end = slot(10)
    # Booked while the facility still had three courts
    await add_booking(db, *keys, 3, start, end)

    assert await availability_allocator.check_availability(db, *keys, start, end) == 2


@pytest.mark.parametrize("hours", [0, -1])
async def test_empty_or_reversed_window_is_rejected(db, keys, hours):
    start, _ = slot(10)

    with pytest.raises(InvalidBookingRequest):
        await availability_allocator.get_available_court(
            db, *keys, start, start + timedelta(hours=hours)
        )


async def test_describe_availability(db, keys):
    start, end = slot(10)
    await add_booking(db, *keys, 1, start, end)

    summary = await availability_allocator.describe_availability(db, *keys, start, end)

    assert summary.status == "available"
    assert summary.court_count == 2
    assert summary.available_courts == 1
    assert summary.next_court_number == 2
    assert summary.price_per_hour == Decimal("12.50")

    await add_booking(db, *keys, 2, start, end)
    summary = await availability_allocator.describe_availability(db, *keys, start, end)

    assert summary.status == "fully_booked"
    assert summary.available_courts == 0
    assert summary.next_court_number is None


async def test_describe_availability_not_offered(db, facility, sport):
    start, end = slot(10)

    summary = await availability_allocator.describe_availability(db, facility.id, sport.id, start, end)

    assert summary.status == "not_offered"
    assert summary.court_count == 0
