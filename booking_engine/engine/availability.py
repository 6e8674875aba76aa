"""
Availability resolver: classify calendar dates for a listing.

Every function is pure over an explicit snapshot. ``today`` is always passed
in; nothing here reads the wall clock or caches a status between calls.

Status precedence, first match wins:
    past -> outside_window (horizon) -> outside_window (listing window)
    -> booked -> buffer -> blocked -> available
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from booking_engine.config import settings
from booking_engine.engine.slots import free_slot_count
from booking_engine.schemas.availability_schema import (
    BlockedInterval,
    DateRange,
    DayStatus,
    DaySummary,
    ExistingBooking,
)
from booking_engine.schemas.listing_schema import ListingAvailabilityProfile

logger = logging.getLogger(__name__)


def _require_date(name: str, value) -> None:
    # datetime is a date subclass but does not compare with one
    if not isinstance(value, date) or isinstance(value, datetime):
        raise ValueError(f"{name} must be a datetime.date, got {type(value).__name__}")


def booking_horizon(today: date) -> date:
    """Last date the platform accepts bookings for."""
    return today + timedelta(days=settings.calendar.booking_horizon_days)


def _is_booked(
    day: date,
    profile: ListingAvailabilityProfile,
    bookings: list[ExistingBooking],
) -> bool:
    if profile.is_multi_slot:
        return free_slot_count(day, profile.total_slots, bookings) == 0
    return any(
        b.holds_inventory and not b.is_hourly and b.covers(day)
        for b in bookings
    )


def resolve_day_status(
    day: date,
    profile: ListingAvailabilityProfile,
    blocks: Iterable[BlockedInterval] = (),
    bookings: Iterable[ExistingBooking] = (),
    buffers: Iterable[date] = (),
    today: Optional[date] = None,
) -> DayStatus:
    """Return exactly one status for ``day``.

    Single-slot listings are ``booked`` when any full-day pending or approved
    booking covers the date. Multi-slot listings are ``booked`` only when no
    slot is left; partial occupancy is reported by ``summarize_day``.

    Raises:
        ValueError: If ``day`` or ``today`` is missing or not a plain date.
    """
    if today is None:
        raise ValueError("today is required")
    _require_date("day", day)
    _require_date("today", today)

    if day < today:
        return DayStatus.PAST
    if day > booking_horizon(today):
        return DayStatus.OUTSIDE_WINDOW
    if profile.available_from is not None and day < profile.available_from:
        return DayStatus.OUTSIDE_WINDOW
    if profile.available_to is not None and day > profile.available_to:
        return DayStatus.OUTSIDE_WINDOW
    if _is_booked(day, profile, list(bookings)):
        return DayStatus.BOOKED
    if day in set(buffers):
        return DayStatus.BUFFER
    if any(block.covers(day) for block in blocks):
        return DayStatus.BLOCKED
    return DayStatus.AVAILABLE


def is_selectable(status: DayStatus) -> bool:
    return status == DayStatus.AVAILABLE


def summarize_day(
    day: date,
    profile: ListingAvailabilityProfile,
    blocks: Iterable[BlockedInterval] = (),
    bookings: Iterable[ExistingBooking] = (),
    buffers: Iterable[date] = (),
    today: Optional[date] = None,
) -> DaySummary:
    """Day status plus the slot aggregate used by calendar heat maps."""
    bookings = list(bookings)
    status = resolve_day_status(day, profile, blocks, bookings, buffers, today)

    day_bookings = [b for b in bookings if b.holds_inventory and b.covers(day)]
    hourly = [b for b in day_bookings if b.is_hourly]
    free = free_slot_count(day, profile.total_slots, day_bookings)
    free_all_day = free_slot_count(day, profile.total_slots, day_bookings, include_hourly=True)

    selectable = is_selectable(status)
    return DaySummary(
        day=day,
        status=status,
        available_slots=free if selectable else 0,
        total_slots=profile.total_slots,
        is_partial=selectable and profile.is_multi_slot and free < profile.total_slots,
        full_day_available=selectable and free_all_day > 0,
        has_hourly_bookings=bool(hourly),
    )


def resolve_range(
    start: date,
    end: date,
    profile: ListingAvailabilityProfile,
    blocks: Iterable[BlockedInterval] = (),
    bookings: Iterable[ExistingBooking] = (),
    buffers: Iterable[date] = (),
    today: Optional[date] = None,
) -> dict[date, DayStatus]:
    """Status of every date in an inclusive range, e.g. one calendar month."""
    blocks, bookings, buffers = list(blocks), list(bookings), frozenset(buffers)
    statuses = {
        day: resolve_day_status(day, profile, blocks, bookings, buffers, today)
        for day in DateRange(start=start, end=end).days()
    }
    logger.debug(
        "Resolved %d dates for %s (%d selectable)",
        len(statuses), profile.listing_id,
        sum(1 for s in statuses.values() if is_selectable(s)),
    )
    return statuses


def first_unavailable_date(
    dates: DateRange,
    profile: ListingAvailabilityProfile,
    blocks: Iterable[BlockedInterval] = (),
    bookings: Iterable[ExistingBooking] = (),
    buffers: Iterable[date] = (),
    today: Optional[date] = None,
) -> Optional[date]:
    """First date in the range that cannot be selected, or None if all can."""
    blocks, bookings, buffers = list(blocks), list(bookings), frozenset(buffers)
    for day in dates.days():
        if not is_selectable(resolve_day_status(day, profile, blocks, bookings, buffers, today)):
            return day
    return None
