"""Checkout session inputs and the reservation payload handed to persistence."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from booking_engine.schemas.availability_schema import BookingStatus, CandidateRange, ExistingBooking
from booking_engine.schemas.listing_schema import FulfillmentMethod


class LicenseType(str, Enum):
    SOLE_PROPRIETOR = "sole_proprietor"
    LLC = "llc"
    CORPORATION = "corporation"
    PARTNERSHIP = "partnership"
    COTTAGE_FOOD = "cottage_food"
    OTHER = "other"


class EmployeeCount(str, Enum):
    JUST_ME = "just_me"
    TWO_TO_THREE = "2-3"
    FOUR_TO_SIX = "4-6"
    SEVEN_PLUS = "7+"


class RenterIdentity(BaseModel):
    """The authenticated renter."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


class BusinessInfo(BaseModel):
    """Business profile collected for food-related categories."""

    license_type: Optional[LicenseType] = None
    license_type_other: str = ""
    employee_count: Optional[EmployeeCount] = None
    intended_use: str = ""
    cuisine_type: str = ""
    equipment_needed: str = ""
    has_food_handlers_cert: bool = False
    has_kitchen_manager_cert: bool = False
    has_liability_insurance: bool = False
    additional_notes: str = ""


class StagedDocument(BaseModel):
    """A file picked by the renter but not yet attached to a reservation."""

    model_config = ConfigDict(frozen=True)

    document_type: str
    file_name: str
    content_type: str = "application/octet-stream"
    size_bytes: int = Field(default=0, ge=0)


class PaymentMode(str, Enum):
    CAPTURE = "capture"
    AUTHORIZATION_HOLD = "authorization_hold"


class ReservationRequest(BaseModel):
    """Final reservation payload with its price snapshot."""

    model_config = ConfigDict(frozen=True)

    listing_id: str
    host_id: str
    renter_id: str
    start_date: date
    end_date: date
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    duration_hours: Optional[int] = None
    slot_number: Optional[int] = None
    slot_name: Optional[str] = None
    fulfillment: FulfillmentMethod
    delivery_address: Optional[str] = None
    delivery_fee_snapshot: Optional[float] = None
    message: Optional[str] = None
    business_info: Optional[dict[str, Any]] = None
    base_price: float
    total_price: float
    deposit_amount: Optional[float] = None
    is_instant_book: bool = False

    @property
    def is_hourly(self) -> bool:
        return self.start_time is not None

    def candidate(self) -> CandidateRange:
        if self.is_hourly:
            return CandidateRange.for_hours(self.start_date, self.start_time, self.end_time)
        return CandidateRange.for_dates(self.start_date, self.end_date)

    def as_booking(self, booking_id: str, status: BookingStatus) -> ExistingBooking:
        return ExistingBooking(
            booking_id=booking_id,
            slot_number=self.slot_number,
            start_date=self.start_date,
            end_date=self.end_date,
            status=status,
            start_time=self.start_time,
            end_time=self.end_time,
        )


class PaymentHandoff(BaseModel):
    """What the caller needs to send the renter to payment."""

    model_config = ConfigDict(frozen=True)

    mode: PaymentMode
    checkout_url: str
    amount_cents: int
    application_fee_cents: int = 0


class SubmitResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    reservation_id: str
    handoff: PaymentHandoff
    documents_attached: int = 0


class ReservationRecord(BaseModel):
    """A stored reservation as the store reports it back."""

    reservation_id: str
    request: ReservationRequest
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
