"""Facility operating hours."""
import logging
from datetime import date, datetime, timedelta, time as dt_time
from typing import Any, Dict, Optional, Tuple

import pytz

from court_booking.core.exceptions import InvalidBookingRequest, OutsideOperatingHours

logger = logging.getLogger(__name__)

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_clock(value: str) -> Optional[dt_time]:
    """
    Parse "HH:MM" into a time. "24:00" returns None, meaning end of day.

    Raises:
        ValueError: If the value is not a valid clock time
    """
    parts = str(value).strip().split(":")
    hour = int(parts[0])
    minute = int(parts[1]) if len(parts) > 1 else 0
    if hour == 24 and minute == 0:
        return None
    return dt_time(hour=hour, minute=minute)


def resolve_timezone(timezone: Optional[str]):
    """
    Look up a facility timezone by its IANA name.

    Raises:
        InvalidBookingRequest: If the name is unknown
    """
    try:
        return pytz.timezone(timezone or "UTC")
    except pytz.UnknownTimeZoneError:
        raise InvalidBookingRequest(f"Unknown timezone '{timezone}'")


def to_facility_local(value: datetime, timezone: str) -> datetime:
    """Convert an aware datetime to the facility's naive wall clock."""
    if value.tzinfo is None:
        return value
    return value.astimezone(resolve_timezone(timezone)).replace(tzinfo=None)


def facility_now(timezone: str) -> datetime:
    """Current naive wall-clock time at the facility."""
    return datetime.now(resolve_timezone(timezone)).replace(tzinfo=None)


def _opening_span(
    operating_hours: Dict[str, Any], day: date
) -> Optional[Tuple[datetime, datetime]]:
    """Opening and closing instants of one calendar day, or None if closed."""
    hours = operating_hours.get(WEEKDAYS[day.weekday()])
    if not hours or hours.get("closed") or "open" not in hours or "close" not in hours:
        return None

    try:
        open_clock = parse_clock(hours["open"]) or dt_time(0, 0)
        close_clock = parse_clock(hours["close"])
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid operating hours {hours!r}: {e}")
        return None

    opens_at = datetime.combine(day, open_clock)
    if close_clock is None:
        closes_at = datetime.combine(day + timedelta(days=1), dt_time(0, 0))
    else:
        closes_at = datetime.combine(day, close_clock)
        if closes_at <= opens_at:
            closes_at += timedelta(days=1)

    return opens_at, closes_at


def is_within_operating_hours(
    operating_hours: Optional[Dict[str, Any]], start_time: datetime, end_time: datetime
) -> bool:
    """
    Check a window against a weekly schedule.

    The schedule looks like {"monday": {"open": "06:00", "close": "23:00"}, ...}.
    No schedule means always open; a missing day or {"closed": true} means
    closed. A close time at or before the open time runs past midnight, so a
    window early on Tuesday may fall inside Monday's hours.

    Args:
        operating_hours: Weekly schedule
        start_time: Window start, facility wall clock
        end_time: Window end, facility wall clock

    Returns:
        True if the whole window falls inside one day's opening hours
    """
    if not operating_hours:
        return True

    for day in (start_time.date(), start_time.date() - timedelta(days=1)):
        span = _opening_span(operating_hours, day)
        if span and span[0] <= start_time and end_time <= span[1]:
            return True

    return False


def check_operating_hours(
    operating_hours: Optional[Dict[str, Any]], start_time: datetime, end_time: datetime
):
    """Raise OutsideOperatingHours unless the window fits the schedule."""
    if not is_within_operating_hours(operating_hours, start_time, end_time):
        raise OutsideOperatingHours(
            f"{start_time:%A %H:%M}-{end_time:%H:%M} is outside the facility's operating hours"
        )


def validate_operating_hours(operating_hours: Optional[Dict[str, Any]]):
    """Reject a malformed weekly schedule before it is stored."""
    if operating_hours is None:
        return
    for day, hours in operating_hours.items():
        if day not in WEEKDAYS:
            raise InvalidBookingRequest(f"Unknown weekday '{day}'")
        if not isinstance(hours, dict):
            raise InvalidBookingRequest(f"Hours for {day} must be an object")
        if hours.get("closed"):
            continue
        try:
            parse_clock(hours["open"])
            parse_clock(hours["close"])
        except (KeyError, TypeError, ValueError):
            raise InvalidBookingRequest(f"Hours for {day} need valid 'open' and 'close' times")
