"""
Hourly window resolver.

Turns a day's open hours and the hourly bookings on it into contiguous
bookable windows, then answers which start times and durations a renter may
pick. All hours are canonical 0-24 integers with an exclusive end; 12-hour
display lives in ``booking_engine.utils``.
"""

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from booking_engine.engine.slots import free_slot_count
from booking_engine.schemas.availability_schema import DayStatus, ExistingBooking, HourWindow
from booking_engine.schemas.listing_schema import HourlySettings

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


def _hour_capacity(
    day: date,
    hourly_settings: HourlySettings,
    total_slots: int,
    bookings: list[ExistingBooking],
    now: Optional[datetime],
) -> list[int]:
    capacity = [0] * HOURS_PER_DAY
    day_capacity = free_slot_count(day, total_slots, bookings)
    for open_range in hourly_settings.open_ranges_for(day):
        for hour in range(open_range.start_hour, open_range.end_hour):
            capacity[hour] = day_capacity

    buffer = hourly_settings.buffer_hours
    for booking in bookings:
        if not (booking.is_hourly and booking.holds_inventory and booking.covers(day)):
            continue
        first = max(booking.start_time - buffer, 0)
        last = min(booking.end_time + buffer, HOURS_PER_DAY)
        for hour in range(first, last):
            capacity[hour] -= 1

    for blocked in hourly_settings.blocked_times:
        if blocked.day == day:
            for hour in range(blocked.start_hour, blocked.end_hour):
                capacity[hour] = 0

    if now is not None and now.date() == day:
        # the current hour has started, so notice counts from the next one
        cutoff = min(now.hour + 1 + hourly_settings.min_notice_hours, HOURS_PER_DAY)
        for hour in range(cutoff):
            capacity[hour] = 0

    return [max(c, 0) for c in capacity]


def windows_for_date(
    day: date,
    hourly_settings: HourlySettings,
    *,
    total_slots: int = 1,
    bookings: Iterable[ExistingBooking] = (),
    now: Optional[datetime] = None,
    day_status: DayStatus = DayStatus.AVAILABLE,
) -> list[HourWindow]:
    """
    Bookable windows for a date.

    Args:
        day: The date being booked.
        hourly_settings: Open hours, buffers and notice rules for the listing.
        total_slots: Slot count of the listing.
        bookings: Bookings on the listing; inactive ones are ignored.
        now: Current instant, used for the minimum-notice cutoff on ``day``.
        day_status: Status of ``day``. Anything other than available yields
            no windows, so hourly selection never reopens a closed date.

    Returns:
        Contiguous windows with spare capacity, each at least ``min_hours``
        long. Missing open hours for the weekday give an empty list.
    """
    if total_slots < 1:
        raise ValueError(f"total_slots must be >= 1, got {total_slots}")
    if day_status != DayStatus.AVAILABLE:
        return []
    if now is not None and now.date() > day:
        return []

    if not hourly_settings.open_ranges_for(day):
        logger.debug("No open hours configured for %s", day)
        return []

    capacity = _hour_capacity(day, hourly_settings, total_slots, list(bookings), now)

    windows = []
    start = None
    for hour in range(HOURS_PER_DAY + 1):
        open_hour = hour < HOURS_PER_DAY and capacity[hour] > 0
        if open_hour and start is None:
            start = hour
        elif not open_hour and start is not None:
            if hour - start >= hourly_settings.min_hours:
                windows.append(HourWindow(
                    start_hour=start,
                    end_hour=hour,
                    available_slots=min(capacity[start:hour]),
                ))
            start = None
    return windows


def start_time_options(windows: Iterable[HourWindow], min_hours: int) -> list[int]:
    """Every start hour that leaves room for ``min_hours`` before its window closes."""
    if min_hours < 1:
        raise ValueError(f"min_hours must be >= 1, got {min_hours}")
    options = set()
    for window in windows:
        options.update(range(window.start_hour, window.end_hour - min_hours + 1))
    return sorted(options)


def max_duration(
    start_hour: int,
    windows: Iterable[HourWindow],
    min_hours: int,
    max_hours: int,
) -> int:
    """Longest booking from ``start_hour``: ``min(window_end - start, max_hours)``.

    With no covering window the result falls back to ``min_hours``.
    """
    for window in windows:
        if window.covers(start_hour):
            return max(min(window.end_hour - start_hour, max_hours), 1)
    return max(min_hours, 1)


def duration_options(
    start_hour: int,
    windows: Iterable[HourWindow],
    min_hours: int,
    max_hours: int,
) -> list[int]:
    longest = max_duration(start_hour, list(windows), min_hours, max_hours)
    return list(range(min_hours, longest + 1))


def end_hour(start_hour: int, duration: int) -> int:
    if duration < 1:
        raise ValueError(f"duration must be >= 1, got {duration}")
    end = start_hour + duration
    if not 0 <= start_hour < end <= HOURS_PER_DAY:
        raise ValueError(f"{start_hour}+{duration}h does not fit in one day")
    return end
