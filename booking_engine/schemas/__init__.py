from booking_engine.schemas.availability_schema import (
    AvailabilitySnapshot,
    BlockedInterval,
    BookingStatus,
    CandidateRange,
    DateRange,
    DayStatus,
    DaySummary,
    ExistingBooking,
    HourRange,
    HourWindow,
    SlotAvailability,
)
from booking_engine.schemas.checkout_schema import (
    BusinessInfo,
    EmployeeCount,
    LicenseType,
    PaymentHandoff,
    PaymentMode,
    RenterIdentity,
    ReservationRecord,
    ReservationRequest,
    StagedDocument,
    SubmitResult,
)
from booking_engine.schemas.listing_schema import (
    BlockedTimeRange,
    FulfillmentMethod,
    FulfillmentType,
    HourlySettings,
    ListingAvailabilityProfile,
    ListingCategory,
    RateCard,
    RequiredDocument,
    TimeRange,
    Weekday,
)
from booking_engine.schemas.pricing_schema import (
    FeeBreakdown,
    PriceResult,
    PricingMode,
    RentalQuote,
)

__all__ = [
    "AvailabilitySnapshot",
    "BlockedInterval",
    "BlockedTimeRange",
    "BookingStatus",
    "BusinessInfo",
    "CandidateRange",
    "DateRange",
    "DayStatus",
    "DaySummary",
    "EmployeeCount",
    "ExistingBooking",
    "FeeBreakdown",
    "FulfillmentMethod",
    "FulfillmentType",
    "HourRange",
    "HourWindow",
    "HourlySettings",
    "LicenseType",
    "ListingAvailabilityProfile",
    "ListingCategory",
    "PaymentHandoff",
    "PaymentMode",
    "PriceResult",
    "PricingMode",
    "RateCard",
    "RentalQuote",
    "RenterIdentity",
    "RequiredDocument",
    "ReservationRecord",
    "ReservationRequest",
    "SlotAvailability",
    "StagedDocument",
    "SubmitResult",
    "TimeRange",
    "Weekday",
]
