"""Tests for operating-hours checks."""
from datetime import datetime

import pytest
import pytz

from court_booking.core.exceptions import InvalidBookingRequest, OutsideOperatingHours
from court_booking.services.operating_hours import (
    check_operating_hours,
    is_within_operating_hours,
    parse_clock,
    resolve_timezone,
    to_facility_local,
    validate_operating_hours,
)

# 2030-01-07 is a Monday
MONDAY = {"monday": {"open": "06:00", "close": "23:00"}}


def at(day, hour, minute=0):
    return datetime(2030, 1, day, hour, minute)


def test_no_schedule_means_always_open():
    assert is_within_operating_hours(None, at(7, 2), at(7, 3))
    assert is_within_operating_hours({}, at(7, 2), at(7, 3))


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (at(7, 6), at(7, 7), True),
        (at(7, 22), at(7, 23), True),
        (at(7, 5, 30), at(7, 6, 30), False),
        (at(7, 22, 30), at(7, 23, 30), False),
        # Tuesday is not listed
        (at(8, 10), at(8, 11), False),
    ],
)
def test_window_against_daily_hours(start, end, expected):
    assert is_within_operating_hours(MONDAY, start, end) is expected


def test_closed_day():
    hours = {"monday": {"closed": True}}

    assert not is_within_operating_hours(hours, at(7, 10), at(7, 11))


def test_hours_past_midnight():
    hours = {"monday": {"open": "18:00", "close": "02:00"}}

    assert is_within_operating_hours(hours, at(7, 23), at(8, 1))
    assert not is_within_operating_hours(hours, at(7, 17), at(7, 19))


def test_open_until_end_of_day():
    hours = {"monday": {"open": "00:00", "close": "24:00"}}

    assert is_within_operating_hours(hours, at(7, 23), at(8, 0))
    assert parse_clock("24:00") is None


def test_check_operating_hours_raises():
    with pytest.raises(OutsideOperatingHours):
        check_operating_hours(MONDAY, at(7, 23), at(8, 0))


@pytest.mark.parametrize(
    "hours",
    [
        {"funday": {"open": "06:00", "close": "23:00"}},
        {"monday": "06:00-23:00"},
        {"monday": {"open": "06:00"}},
        {"monday": {"open": "6am", "close": "23:00"}},
    ],
)
def test_validate_operating_hours_rejects_malformed(hours):
    with pytest.raises(InvalidBookingRequest):
        validate_operating_hours(hours)


def test_to_facility_local():
    aware = pytz.UTC.localize(datetime(2030, 1, 7, 9))

    assert to_facility_local(aware, "Europe/Madrid") == datetime(2030, 1, 7, 10)
    assert to_facility_local(datetime(2030, 1, 7, 9), "Europe/Madrid") == datetime(2030, 1, 7, 9)


def test_early_morning_window_inside_previous_day_hours():
    hours = {"monday": {"open": "18:00", "close": "02:00"}}

    assert is_within_operating_hours(hours, at(8, 1), at(8, 2))
    assert not is_within_operating_hours(hours, at(8, 1, 30), at(8, 2, 30))
    # Sunday is not listed, so early Monday is closed
    assert not is_within_operating_hours(hours, at(7, 1), at(7, 2))


def test_unknown_timezone_is_invalid_request():
    with pytest.raises(InvalidBookingRequest):
        resolve_timezone("Mars/Base")
    with pytest.raises(InvalidBookingRequest):
        to_facility_local(pytz.UTC.localize(datetime(2030, 1, 7, 9)), "Mars/Base")

    assert resolve_timezone(None) is pytz.UTC
