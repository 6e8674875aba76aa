"""Listing-scoped configuration snapshots: rate card, hourly settings, availability profile."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from booking_engine.config import settings
from booking_engine.utils import parse_hour


class ListingCategory(str, Enum):
    FOOD_TRUCK = "food_truck"
    FOOD_TRAILER = "food_trailer"
    GHOST_KITCHEN = "ghost_kitchen"
    VENDOR_LOT = "vendor_lot"
    VENDOR_SPACE = "vendor_space"


class FulfillmentType(str, Enum):
    """How the host offers the asset."""
    PICKUP = "pickup"
    DELIVERY = "delivery"
    BOTH = "both"
    ON_SITE = "on_site"


class FulfillmentMethod(str, Enum):
    """How the renter chose to receive the asset."""
    PICKUP = "pickup"
    DELIVERY = "delivery"
    ON_SITE = "on_site"


class Weekday(str, Enum):
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]


BUSINESS_INFO_CATEGORIES = frozenset({
    ListingCategory.FOOD_TRUCK,
    ListingCategory.FOOD_TRAILER,
    ListingCategory.GHOST_KITCHEN,
})

STATIC_LOCATION_CATEGORIES = frozenset({
    ListingCategory.GHOST_KITCHEN,
    ListingCategory.VENDOR_LOT,
    ListingCategory.VENDOR_SPACE,
})


def _coerce_hour(value):
    """Accept 'HH:MM' strings wherever an hour is expected."""
    if isinstance(value, str):
        return parse_hour(value)
    return value


class RateCard(BaseModel):
    """Per-unit prices. Any tier may be absent."""

    model_config = ConfigDict(frozen=True)

    price_daily: Optional[float] = Field(default=None, ge=0)
    price_weekly: Optional[float] = Field(default=None, ge=0)
    price_monthly: Optional[float] = Field(default=None, ge=0)
    price_hourly: Optional[float] = Field(default=None, ge=0)


class TimeRange(BaseModel):
    """A host-configured open range within a day, half-open in hours."""

    model_config = ConfigDict(frozen=True)

    start_hour: int = Field(ge=0, le=24)
    end_hour: int = Field(ge=0, le=24)

    @field_validator("start_hour", "end_hour", mode="before")
    @classmethod
    def _parse_hours(cls, value):
        return _coerce_hour(value)

    @model_validator(mode="after")
    def _check_order(self) -> "TimeRange":
        if self.end_hour <= self.start_hour:
            raise ValueError(
                f"end_hour ({self.end_hour}) must be after start_hour ({self.start_hour})"
            )
        return self


class BlockedTimeRange(TimeRange):
    """Hours on one specific date that the host has closed."""

    day: date


class RequiredDocument(BaseModel):
    """A document type the host requires before a booking can be requested."""

    model_config = ConfigDict(frozen=True)

    document_type: str
    label: str = ""
    description: str = ""


class HourlySettings(BaseModel):
    """Per-listing hourly booking rules, fetched once per session."""

    model_config = ConfigDict(frozen=True)

    min_hours: int = Field(default=1, ge=1, le=24)
    max_hours: int = Field(default=24, ge=1, le=24)
    buffer_time_mins: int = Field(default=0, ge=0)
    min_notice_hours: int = Field(default=0, ge=0)
    operating_hours_start: Optional[int] = Field(default=None, ge=0, le=24)
    operating_hours_end: Optional[int] = Field(default=None, ge=0, le=24)
    weekly_schedule: Optional[dict[Weekday, tuple[TimeRange, ...]]] = None
    blocked_times: tuple[BlockedTimeRange, ...] = ()

    @field_validator("operating_hours_start", "operating_hours_end", mode="before")
    @classmethod
    def _parse_operating_hours(cls, value):
        return _coerce_hour(value)

    @field_validator("weekly_schedule", mode="before")
    @classmethod
    def _normalize_schedule_keys(cls, value):
        # Accepts "Monday", "MON", "mon" style keys.
        if not isinstance(value, dict):
            return value
        return {str(key).strip().lower()[:3]: ranges for key, ranges in value.items()}

    @model_validator(mode="after")
    def _check_bounds(self) -> "HourlySettings":
        if self.max_hours < self.min_hours:
            raise ValueError(
                f"max_hours ({self.max_hours}) must be >= min_hours ({self.min_hours})"
            )
        return self

    @property
    def buffer_hours(self) -> int:
        return -(-self.buffer_time_mins // 60)

    def open_ranges_for(self, day: date) -> list[TimeRange]:
        """Open hours for a date: weekly schedule entry, else operating hours."""
        if self.weekly_schedule is not None:
            return list(self.weekly_schedule.get(Weekday.from_date(day), ()))
        start = self.operating_hours_start
        end = self.operating_hours_end
        if start is None:
            start = settings.calendar.default_open_hour
        if end is None:
            end = settings.calendar.default_close_hour
        if end <= start:
            return []
        return [TimeRange(start_hour=start, end_hour=end)]


class ListingAvailabilityProfile(BaseModel):
    """Immutable per-booking-session snapshot of a listing's availability rules.

    Re-fetch a fresh snapshot when a session is reopened; never mutate one.
    """

    model_config = ConfigDict(frozen=True)

    listing_id: str
    host_id: str
    category: ListingCategory = ListingCategory.FOOD_TRUCK
    title: str = ""
    available_from: Optional[date] = None
    available_to: Optional[date] = None
    total_slots: int = Field(default=1, ge=1)
    slot_names: tuple[str, ...] = ()
    daily_enabled: bool = True
    hourly_enabled: bool = False
    rates: RateCard = Field(default_factory=RateCard)
    hourly: HourlySettings = Field(default_factory=HourlySettings)
    instant_book: bool = False
    fulfillment_type: FulfillmentType = FulfillmentType.PICKUP
    delivery_fee: Optional[float] = Field(default=None, ge=0)
    deposit_amount: Optional[float] = Field(default=None, ge=0)
    required_documents: tuple[RequiredDocument, ...] = ()

    @model_validator(mode="after")
    def _check_profile(self) -> "ListingAvailabilityProfile":
        if not self.rates.price_daily and not self.rates.price_hourly:
            raise ValueError("A listing needs a daily or an hourly price")
        if len(self.slot_names) > self.total_slots:
            raise ValueError(
                f"{len(self.slot_names)} slot names given for {self.total_slots} slots"
            )
        if (
            self.available_from is not None
            and self.available_to is not None
            and self.available_from > self.available_to
        ):
            raise ValueError("available_from must not be after available_to")
        return self

    @property
    def is_multi_slot(self) -> bool:
        return self.total_slots > 1

    @property
    def supports_hourly(self) -> bool:
        return self.hourly_enabled or bool(self.rates.price_hourly)

    @property
    def requires_business_info(self) -> bool:
        return self.category in BUSINESS_INFO_CATEGORIES

    @property
    def is_static_location(self) -> bool:
        return self.category in STATIC_LOCATION_CATEGORIES

    @property
    def has_required_documents(self) -> bool:
        return bool(self.required_documents)

    def slot_label(self, slot_number: int) -> str:
        """Display name for a 1-based slot number."""
        if not 1 <= slot_number <= self.total_slots:
            raise ValueError(f"Slot {slot_number} out of range 1..{self.total_slots}")
        if slot_number <= len(self.slot_names) and self.slot_names[slot_number - 1]:
            return self.slot_names[slot_number - 1]
        return f"{settings.calendar.slot_label_prefix} {slot_number}"

    def default_fulfillment(self) -> FulfillmentMethod:
        if self.is_static_location:
            return FulfillmentMethod.ON_SITE
        if self.fulfillment_type == FulfillmentType.DELIVERY:
            return FulfillmentMethod.DELIVERY
        return FulfillmentMethod.PICKUP

    def offers(self, method: FulfillmentMethod) -> bool:
        """Whether the renter may choose this fulfillment method."""
        if self.is_static_location:
            return method == FulfillmentMethod.ON_SITE
        if self.fulfillment_type == FulfillmentType.BOTH:
            return method in (FulfillmentMethod.PICKUP, FulfillmentMethod.DELIVERY)
        return method.value == self.fulfillment_type.value
