"""Shift timing calculations.

Single home of the lead-time rules used by the approval workflow and by
the UI timing preview endpoint:

    - hours_until: signed hours between now and a shift's local start
    - auto_approve_manager_assignment: lead time > 48h
    - auto_approve_worker_request: lead time > 120h (5 days)
    - can_worker_edit_assignment: lead time > 48h

Shift dates ("YYYY-MM-DD") and clock times ("HH:MM") are composed from
calendar fields in the shop's timezone, so day, month, year, leap-year and
DST boundaries follow real calendar arithmetic. All threshold comparisons
are strict: a shift exactly at the threshold does not qualify.
"""

from datetime import date, datetime, time, timezone
from typing import Iterable, Mapping
from zoneinfo import ZoneInfo

from shopshift.config import settings
from shopshift.utils.exceptions import BadRequestError


def parse_shift_date(value: str | date) -> date:
    """Parse a "YYYY-MM-DD" string into a date.

    Raises:
        BadRequestError: When the string is not a valid calendar date
    """
    if isinstance(value, date):
        return value
    try:
        year, month, day = (int(part) for part in value.split("-"))
        return date(year, month, day)
    except (ValueError, AttributeError):
        raise BadRequestError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_clock(value: str | time) -> time:
    """Parse an "HH:MM" string into a time.

    Raises:
        BadRequestError: When the string is not a valid clock time
    """
    if isinstance(value, time):
        return value
    try:
        hours, minutes = (int(part) for part in value.split(":"))
        return time(hours, minutes)
    except (ValueError, AttributeError):
        raise BadRequestError(f"Invalid time: {value!r} (expected HH:MM)")


def format_clock(value: time | None) -> str | None:
    """Format a time object as "HH:MM"."""
    if value is None:
        return None
    return value.strftime("%H:%M")


def shop_zone() -> ZoneInfo:
    return ZoneInfo(settings.SHOP_TIMEZONE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def shift_start(shift_date: str | date, start_time: str | time) -> datetime:
    """Compose the timezone-aware local start instant of a shift.

    Args:
        shift_date: Shift date, "YYYY-MM-DD" or date
        start_time: Start clock time, "HH:MM" or time

    Returns:
        datetime: Aware datetime in the shop timezone
    """
    d: date = parse_shift_date(shift_date)
    t: time = parse_clock(start_time)
    return datetime(d.year, d.month, d.day, t.hour, t.minute, tzinfo=shop_zone())


def hours_until(
    shift_date: str | date,
    start_time: str | time,
    now: datetime | None = None,
) -> float:
    """Hours from now until the shift starts.

    Positive for future shifts, negative for shifts already started.
    Minutes contribute fractional hours.

    Args:
        shift_date: Shift date, "YYYY-MM-DD" or date
        start_time: Start clock time, "HH:MM" or time
        now: Reference instant (aware); defaults to the current UTC instant

    Returns:
        float: Signed hours until shift start
    """
    reference: datetime = now if now is not None else utc_now()
    delta = shift_start(shift_date, start_time) - reference
    return delta.total_seconds() / 3600


def auto_approve_manager_assignment(
    shift_date: str | date,
    start_time: str | time,
    now: datetime | None = None,
) -> bool:
    """True if a manager assignment is far enough out to skip worker sign-off."""
    return hours_until(shift_date, start_time, now) > settings.MANAGER_ASSIGNMENT_AUTO_APPROVE_HOURS


def auto_approve_worker_request(
    shift_date: str | date,
    start_time: str | time,
    now: datetime | None = None,
) -> bool:
    """True if a worker join request is far enough out to skip manager review."""
    return hours_until(shift_date, start_time, now) > settings.WORKER_REQUEST_AUTO_APPROVE_HOURS


def can_worker_edit_assignment(
    shift_date: str | date,
    start_time: str | time,
    now: datetime | None = None,
) -> bool:
    """True if a worker may still edit their own assignment without a manager."""
    return hours_until(shift_date, start_time, now) > settings.WORKER_EDIT_WINDOW_HOURS


def earliest_start(hour_ranges: Iterable[Mapping[str, str]]) -> str:
    """Return the earliest start_time ("HH:MM") among hour ranges.

    Zero-padded "HH:MM" strings order the same way as the times they encode.

    Raises:
        BadRequestError: When no ranges are given
    """
    starts: list[str] = [r["start_time"] for r in hour_ranges]
    if not starts:
        raise BadRequestError("At least one hour range is required")
    return min(starts)
