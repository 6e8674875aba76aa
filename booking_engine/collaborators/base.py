"""Interfaces the checkout needs from storage, documents and payments."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from booking_engine.schemas.availability_schema import AvailabilitySnapshot, BookingStatus, DateRange
from booking_engine.schemas.checkout_schema import (
    PaymentHandoff,
    ReservationRecord,
    ReservationRequest,
    StagedDocument,
)


class AvailabilitySource(ABC):
    """Read side of the bookings table plus host blocks and buffer dates."""

    @abstractmethod
    async def fetch_snapshot(self, listing_id: str, window: DateRange) -> AvailabilitySnapshot:
        """Return blocks, buffers and pending/approved bookings overlapping ``window``."""


class ReservationStore(ABC):
    """Write side of the bookings table.

    ``create`` must enforce exclusivity itself: an insert that overlaps a
    pending or approved reservation on the same listing and slot raises
    ``AvailabilityConflict``. Other failures raise ``PersistenceError``.
    """

    @abstractmethod
    async def create(self, request: ReservationRequest) -> str:
        """Persist the request and return the new reservation id."""

    @abstractmethod
    async def mark_status(self, reservation_id: str, status: BookingStatus) -> None:
        """Move a reservation to a new status."""

    @abstractmethod
    async def get(self, reservation_id: str) -> Optional[ReservationRecord]:
        """Fetch a stored reservation, or None if unknown."""


class DocumentStager(ABC):
    @abstractmethod
    async def attach(self, reservation_id: str, document: StagedDocument) -> None:
        """Attach a staged file to a reservation."""


class PaymentGateway(ABC):
    """Starts payment for a stored reservation.

    Instant-book listings capture immediately; request-to-book listings only
    place an authorization hold until the host responds.
    """

    @abstractmethod
    async def create_checkout(
        self,
        reservation_id: str,
        amount_cents: int,
        application_fee_cents: int,
    ) -> PaymentHandoff:
        """Start an immediate-capture checkout."""

    @abstractmethod
    async def create_authorization_hold(
        self,
        reservation_id: str,
        amount_cents: int,
        application_fee_cents: int,
    ) -> PaymentHandoff:
        """Start an authorization-only checkout."""


@dataclass
class CheckoutCollaborators:
    """Everything ``BookingStepGate.submit`` talks to."""
    availability: AvailabilitySource
    reservations: ReservationStore
    documents: DocumentStager
    payments: PaymentGateway
