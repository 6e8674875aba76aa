"""Availability inputs and outputs: bookings, blocks, ranges, day and slot status."""

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from booking_engine.utils import parse_hour


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    PAYMENT_FAILED = "payment_failed"

    @property
    def holds_inventory(self) -> bool:
        return self in (BookingStatus.PENDING, BookingStatus.APPROVED)


class DayStatus(str, Enum):
    """Exactly one status per date per resolution call."""
    AVAILABLE = "available"
    BLOCKED = "blocked"
    BOOKED = "booked"
    BUFFER = "buffer"
    PAST = "past"
    OUTSIDE_WINDOW = "outside_window"


class DateRange(BaseModel):
    """Inclusive calendar range."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError(f"Range end {self.end} is before start {self.start}")
        return self

    @classmethod
    def single(cls, day: date) -> "DateRange":
        return cls(start=day, end=day)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, other: "DateRange") -> bool:
        return self.start <= other.end and self.end >= other.start

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)


class HourRange(BaseModel):
    """Half-open hour range [start_hour, end_hour) within a single day."""

    model_config = ConfigDict(frozen=True)

    start_hour: int = Field(ge=0, le=23)
    end_hour: int = Field(ge=1, le=24)

    @model_validator(mode="after")
    def _check_order(self) -> "HourRange":
        if self.end_hour <= self.start_hour:
            raise ValueError("Hour range must have positive length")
        return self

    @property
    def duration(self) -> int:
        return self.end_hour - self.start_hour

    def overlaps(self, other: "HourRange") -> bool:
        return self.start_hour < other.end_hour and other.start_hour < self.end_hour

    def covers(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


class CandidateRange(BaseModel):
    """What a renter is trying to book: a date range, or hours on one date."""

    model_config = ConfigDict(frozen=True)

    dates: DateRange
    hours: Optional[HourRange] = None

    @model_validator(mode="after")
    def _check_hourly_single_day(self) -> "CandidateRange":
        if self.hours is not None and self.dates.start != self.dates.end:
            raise ValueError("Hourly candidates must fall on a single date")
        return self

    @classmethod
    def for_dates(cls, start: date, end: date) -> "CandidateRange":
        return cls(dates=DateRange(start=start, end=end))

    @classmethod
    def for_hours(cls, day: date, start_hour: int, end_hour: int) -> "CandidateRange":
        return cls(
            dates=DateRange.single(day),
            hours=HourRange(start_hour=start_hour, end_hour=end_hour),
        )

    @property
    def is_hourly(self) -> bool:
        return self.hours is not None


class BlockedInterval(BaseModel):
    """A date or inclusive date range the host has excluded."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: Optional[date] = None
    reason: Optional[str] = None

    @model_validator(mode="after")
    def _check_order(self) -> "BlockedInterval":
        if self.end is not None and self.end < self.start:
            raise ValueError(f"Blocked interval end {self.end} is before start {self.start}")
        return self

    def covers(self, day: date) -> bool:
        return self.start <= day <= (self.end or self.start)


class ExistingBooking(BaseModel):
    """A booking as seen by the engine: read-only and scoped to one listing."""

    model_config = ConfigDict(frozen=True)

    booking_id: Optional[str] = None
    slot_number: Optional[int] = Field(default=None, ge=1)
    start_date: date
    end_date: date
    status: BookingStatus = BookingStatus.PENDING
    start_time: Optional[int] = Field(default=None, ge=0, le=23)
    end_time: Optional[int] = Field(default=None, ge=1, le=24)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, value):
        if isinstance(value, str):
            return parse_hour(value)
        return value

    @model_validator(mode="after")
    def _check_shape(self) -> "ExistingBooking":
        if self.end_date < self.start_date:
            raise ValueError("Booking end_date is before start_date")
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("Hourly bookings need both start_time and end_time")
        if self.start_time is not None and self.end_time <= self.start_time:
            raise ValueError("Hourly booking end_time must be after start_time")
        return self

    @property
    def is_hourly(self) -> bool:
        return self.start_time is not None

    @property
    def holds_inventory(self) -> bool:
        return self.status.holds_inventory

    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.start_date, end=self.end_date)

    @property
    def hour_range(self) -> Optional[HourRange]:
        if not self.is_hourly:
            return None
        return HourRange(start_hour=self.start_time, end_hour=self.end_time)

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class AvailabilitySnapshot(BaseModel):
    """Point-in-time read of a listing's blocks, buffers and bookings."""

    model_config = ConfigDict(frozen=True)

    listing_id: str
    blocks: tuple[BlockedInterval, ...] = ()
    buffers: frozenset[date] = frozenset()
    bookings: tuple[ExistingBooking, ...] = ()
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DaySummary(BaseModel):
    """Day status plus the aggregate slot signal used by calendar heat maps."""

    model_config = ConfigDict(frozen=True)

    day: date
    status: DayStatus
    available_slots: int
    total_slots: int
    is_partial: bool = False
    full_day_available: bool = False
    has_hourly_bookings: bool = False


class SlotAvailability(BaseModel):
    """Whether one slot is free for a specific candidate range."""

    model_config = ConfigDict(frozen=True)

    slot_number: int
    slot_name: str
    is_available: bool


class HourWindow(BaseModel):
    """A contiguous bookable block of hours within a day, exclusive end."""

    model_config = ConfigDict(frozen=True)

    start_hour: int = Field(ge=0, le=23)
    end_hour: int = Field(ge=1, le=24)
    available_slots: int = Field(default=1, ge=0)

    @property
    def duration(self) -> int:
        return self.end_hour - self.start_hour

    def covers(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour
