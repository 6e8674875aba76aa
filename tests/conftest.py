"""Shared test fixtures and helpers."""

from datetime import date
from typing import Optional

import pytest

from booking_engine.checkout.step_gate import BookingStepGate, CheckoutStep
from booking_engine.collaborators import (
    CheckoutCollaborators,
    InMemoryAvailabilitySource,
    InMemoryDocumentStager,
    InMemoryPaymentGateway,
    InMemoryReservationStore,
)
from booking_engine.schemas import (
    AvailabilitySnapshot,
    BlockedInterval,
    BookingStatus,
    BusinessInfo,
    EmployeeCount,
    ExistingBooking,
    FulfillmentType,
    HourlySettings,
    LicenseType,
    ListingAvailabilityProfile,
    ListingCategory,
    RateCard,
    RenterIdentity,
    RequiredDocument,
    StagedDocument,
)

TODAY = date(2026, 9, 20)


def make_profile(**overrides) -> ListingAvailabilityProfile:
    """Single-slot vendor space at $100/day, $600/week unless overridden."""
    fields = {
        "listing_id": "L-100",
        "host_id": "host-1",
        "category": ListingCategory.VENDOR_SPACE,
        "title": "Downtown vendor space",
        "rates": RateCard(price_daily=100, price_weekly=600),
    }
    fields.update(overrides)
    return ListingAvailabilityProfile(**fields)


def make_booking(
    start: date,
    end: Optional[date] = None,
    *,
    slot: Optional[int] = None,
    status: BookingStatus = BookingStatus.APPROVED,
    start_time: Optional[int] = None,
    end_time: Optional[int] = None,
    booking_id: str = "B-1",
) -> ExistingBooking:
    return ExistingBooking(
        booking_id=booking_id,
        slot_number=slot,
        start_date=start,
        end_date=end or start,
        status=status,
        start_time=start_time,
        end_time=end_time,
    )


def make_snapshot(
    listing_id: str = "L-100",
    bookings: tuple[ExistingBooking, ...] = (),
    blocks: tuple[BlockedInterval, ...] = (),
    buffers: frozenset[date] = frozenset(),
) -> AvailabilitySnapshot:
    return AvailabilitySnapshot(
        listing_id=listing_id,
        bookings=tuple(bookings),
        blocks=tuple(blocks),
        buffers=frozenset(buffers),
    )


def complete_business_info() -> BusinessInfo:
    return BusinessInfo(
        license_type=LicenseType.LLC,
        employee_count=EmployeeCount.TWO_TO_THREE,
        intended_use="Weekend farmers market",
        cuisine_type="Tacos",
    )


def make_document(document_type: str) -> StagedDocument:
    return StagedDocument(
        document_type=document_type,
        file_name=f"{document_type}.pdf",
        content_type="application/pdf",
        size_bytes=2048,
    )


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def daily_profile():
    return make_profile()


@pytest.fixture
def multi_slot_profile():
    return make_profile(
        listing_id="L-200",
        category=ListingCategory.VENDOR_LOT,
        total_slots=2,
        slot_names=("Corner",),
        rates=RateCard(price_daily=50),
    )


@pytest.fixture
def hourly_settings():
    return HourlySettings(
        min_hours=2,
        max_hours=6,
        operating_hours_start="09:00",
        operating_hours_end="17:00",
    )


@pytest.fixture
def hourly_profile(hourly_settings):
    return make_profile(
        listing_id="L-300",
        daily_enabled=False,
        hourly_enabled=True,
        rates=RateCard(price_hourly=25),
        hourly=hourly_settings,
    )


@pytest.fixture
def food_truck_profile():
    return make_profile(
        listing_id="L-400",
        category=ListingCategory.FOOD_TRUCK,
        title="Taco truck",
        rates=RateCard(price_daily=200, price_weekly=1000, price_monthly=3500),
        fulfillment_type=FulfillmentType.BOTH,
        delivery_fee=75,
        deposit_amount=500,
        instant_book=True,
        required_documents=(
            RequiredDocument(document_type="drivers_license"),
            RequiredDocument(document_type="food_handler_certificate"),
        ),
    )


@pytest.fixture
def renter():
    return RenterIdentity(user_id="renter-1", email="renter@example.com", full_name="Ana Ruiz")


@pytest.fixture
def store():
    store = InMemoryReservationStore()
    yield store
    store.reset()


@pytest.fixture
def source(store):
    source = InMemoryAvailabilitySource(store)
    yield source
    source.reset()


@pytest.fixture
def stager():
    stager = InMemoryDocumentStager()
    yield stager
    stager.reset()


@pytest.fixture
def gateway():
    gateway = InMemoryPaymentGateway()
    yield gateway
    gateway.reset()


@pytest.fixture
def collaborators(source, store, stager, gateway):
    return CheckoutCollaborators(
        availability=source,
        reservations=store,
        documents=stager,
        payments=gateway,
    )


def ready_gate(
    profile: ListingAvailabilityProfile,
    renter: RenterIdentity,
    start: date = date(2026, 10, 1),
    end: date = date(2026, 10, 8),
    slot: Optional[int] = None,
    snapshot: Optional[AvailabilitySnapshot] = None,
) -> BookingStepGate:
    """A daily-booking gate walked through to the review step."""
    gate = BookingStepGate(
        profile,
        snapshot or make_snapshot(profile.listing_id),
        today=TODAY,
    )
    gate.sign_in(renter)
    gate.complete_step(CheckoutStep.IDENTITY)
    if CheckoutStep.BUSINESS_INFO in gate.steps:
        gate.set_business_info(complete_business_info())
        gate.complete_step(CheckoutStep.BUSINESS_INFO)
    if CheckoutStep.DOCUMENTS in gate.steps:
        for doc in profile.required_documents:
            gate.stage_document(make_document(doc.document_type))
        gate.complete_step(CheckoutStep.DOCUMENTS)
    gate.select_dates(start, end)
    if slot is not None:
        gate.select_slot(slot)
    gate.accept_terms()
    gate.complete_step(CheckoutStep.FULFILLMENT)
    return gate
