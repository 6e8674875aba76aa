"""
Slot allocator for listings with N interchangeable numbered spaces.

Slot checks are per exact slot number. Bookings without a slot number only
count against a multi-slot listing through ``free_slot_count``.
"""

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from booking_engine.config import settings
from booking_engine.schemas.availability_schema import (
    CandidateRange,
    ExistingBooking,
    SlotAvailability,
)

logger = logging.getLogger(__name__)


def _check_slot_count(total_slots: int) -> None:
    if total_slots < 1:
        raise ValueError(f"total_slots must be >= 1, got {total_slots}")


def overlaps(booking: ExistingBooking, candidate: CandidateRange) -> bool:
    """Inclusive date overlap, then half-open hour overlap when both are hourly.

    A full-day booking overlaps any hourly candidate on its dates, and an
    hourly booking overlaps any full-day candidate covering its date.
    """
    if not booking.date_range.overlaps(candidate.dates):
        return False
    if booking.is_hourly and candidate.is_hourly:
        return booking.hour_range.overlaps(candidate.hours)
    return True


def find_conflicts(
    candidate: CandidateRange,
    bookings: Iterable[ExistingBooking],
    slot_number: Optional[int] = None,
) -> list[ExistingBooking]:
    """Inventory-holding bookings that overlap the candidate.

    With ``slot_number`` only bookings on that exact slot are returned;
    without it every overlapping booking conflicts (single-slot listings).
    """
    return [
        booking
        for booking in bookings
        if booking.holds_inventory
        and (slot_number is None or booking.slot_number == slot_number)
        and overlaps(booking, candidate)
    ]


def is_slot_free(
    slot_number: int,
    candidate: CandidateRange,
    slot_bookings: Iterable[ExistingBooking],
) -> bool:
    if slot_number < 1:
        raise ValueError(f"slot_number must be >= 1, got {slot_number}")
    conflicts = find_conflicts(candidate, slot_bookings, slot_number)
    if conflicts:
        logger.debug(
            "Slot %d taken for %s..%s by %s",
            slot_number, candidate.dates.start, candidate.dates.end,
            [b.booking_id for b in conflicts],
        )
    return not conflicts


def available_slots(
    total_slots: int,
    slot_names: Sequence[str],
    candidate: Optional[CandidateRange],
    slot_bookings: Iterable[ExistingBooking],
) -> list[SlotAvailability]:
    """
    Free/taken state of every slot for a candidate range.

    Without a candidate every slot is reported available. That result is
    only good for browsing; commit must re-check with the final range.

    Raises:
        ValueError: On a non-positive slot count or more names than slots.
    """
    _check_slot_count(total_slots)
    if len(slot_names) > total_slots:
        raise ValueError(f"{len(slot_names)} slot names given for {total_slots} slots")

    bookings = list(slot_bookings)
    result = []
    for number in range(1, total_slots + 1):
        name = ""
        if number <= len(slot_names):
            name = slot_names[number - 1]
        result.append(SlotAvailability(
            slot_number=number,
            slot_name=name or f"{settings.calendar.slot_label_prefix} {number}",
            is_available=candidate is None or is_slot_free(number, candidate, bookings),
        ))
    return result


def _slots_taken(bookings: Iterable[ExistingBooking]) -> int:
    numbered = set()
    unnumbered = 0
    for booking in bookings:
        if booking.slot_number is None:
            unnumbered += 1
        else:
            numbered.add(booking.slot_number)
    return len(numbered) + unnumbered


def free_slot_count(
    day: date,
    total_slots: int,
    bookings: Iterable[ExistingBooking],
    *,
    include_hourly: bool = False,
) -> int:
    """How many slots have no inventory-holding booking on ``day``.

    Hourly bookings are ignored unless ``include_hourly`` is set, since a slot
    with a few booked hours can still take other hourly bookings.
    """
    _check_slot_count(total_slots)
    taken = _slots_taken(
        b for b in bookings
        if b.holds_inventory and b.covers(day) and (include_hourly or not b.is_hourly)
    )
    return max(total_slots - taken, 0)
