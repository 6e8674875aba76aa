"""
In-memory collaborators.

Stand-ins for the bookings table, the document bucket and the payment
provider, used by tests and local runs. Each keeps its state on the instance
and exposes ``reset()`` for test isolation.
"""

import asyncio
import logging
import threading
import uuid
from datetime import date
from typing import Optional

from booking_engine.collaborators.base import (
    AvailabilitySource,
    DocumentStager,
    PaymentGateway,
    ReservationStore,
)
from booking_engine.config import settings
from booking_engine.engine.slots import find_conflicts
from booking_engine.exceptions import AvailabilityConflict, PersistenceError
from booking_engine.schemas.availability_schema import (
    AvailabilitySnapshot,
    BlockedInterval,
    BookingStatus,
    DateRange,
    ExistingBooking,
)
from booking_engine.schemas.checkout_schema import (
    PaymentHandoff,
    PaymentMode,
    ReservationRecord,
    ReservationRequest,
    StagedDocument,
)

logger = logging.getLogger(__name__)


class InMemoryReservationStore(ReservationStore):
    """Bookings table with the exclusion constraint enforced under a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, ReservationRecord] = {}
        self._external: dict[str, list[ExistingBooking]] = {}
        self.fail_next_create = False

    def seed_booking(self, listing_id: str, booking: ExistingBooking) -> None:
        """Add a booking made outside this store, e.g. by another session."""
        with self._lock:
            self._external.setdefault(listing_id, []).append(booking)

    def _bookings_for(self, listing_id: str) -> list[ExistingBooking]:
        bookings = list(self._external.get(listing_id, []))
        for record in self._records.values():
            if record.request.listing_id == listing_id:
                bookings.append(record.request.as_booking(record.reservation_id, record.status))
        return bookings

    def bookings_for(self, listing_id: str) -> list[ExistingBooking]:
        with self._lock:
            return self._bookings_for(listing_id)

    async def create(self, request: ReservationRequest) -> str:
        await asyncio.sleep(0)
        with self._lock:
            if self.fail_next_create:
                self.fail_next_create = False
                raise PersistenceError("Reservation store unavailable")

            conflicts = find_conflicts(
                request.candidate(),
                self._bookings_for(request.listing_id),
                request.slot_number,
            )
            if conflicts:
                raise AvailabilityConflict(
                    f"Listing {request.listing_id} slot {request.slot_number} overlaps "
                    f"{[b.booking_id for b in conflicts]}",
                )

            reservation_id = f"RES-{uuid.uuid4().hex[:8].upper()}"
            self._records[reservation_id] = ReservationRecord(
                reservation_id=reservation_id,
                request=request,
            )

        logger.info(
            "Reservation stored: %s for %s %s..%s",
            reservation_id, request.listing_id, request.start_date, request.end_date,
        )
        return reservation_id

    async def mark_status(self, reservation_id: str, status: BookingStatus) -> None:
        with self._lock:
            record = self._records.get(reservation_id)
            if record is None:
                raise PersistenceError(f"Reservation {reservation_id} not found")
            self._records[reservation_id] = record.model_copy(update={"status": status})
        logger.info("Reservation %s marked %s", reservation_id, status.value)

    async def get(self, reservation_id: str) -> Optional[ReservationRecord]:
        with self._lock:
            return self._records.get(reservation_id)

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
            self._external.clear()
            self.fail_next_create = False


class InMemoryAvailabilitySource(AvailabilitySource):
    """Reads bookings from an ``InMemoryReservationStore`` plus host-managed dates."""

    def __init__(self, store: InMemoryReservationStore) -> None:
        self._store = store
        self._blocks: dict[str, list[BlockedInterval]] = {}
        self._buffers: dict[str, set[date]] = {}

    def add_block(self, listing_id: str, block: BlockedInterval) -> None:
        self._blocks.setdefault(listing_id, []).append(block)

    def add_buffer(self, listing_id: str, day: date) -> None:
        self._buffers.setdefault(listing_id, set()).add(day)

    async def fetch_snapshot(self, listing_id: str, window: DateRange) -> AvailabilitySnapshot:
        await asyncio.sleep(0)
        bookings = [
            b for b in self._store.bookings_for(listing_id)
            if b.holds_inventory and b.date_range.overlaps(window)
        ]
        blocks = [
            b for b in self._blocks.get(listing_id, [])
            if b.start <= window.end and (b.end or b.start) >= window.start
        ]
        buffers = {d for d in self._buffers.get(listing_id, set()) if window.contains(d)}
        return AvailabilitySnapshot(
            listing_id=listing_id,
            blocks=tuple(blocks),
            buffers=frozenset(buffers),
            bookings=tuple(bookings),
        )

    def reset(self) -> None:
        self._blocks.clear()
        self._buffers.clear()


class InMemoryDocumentStager(DocumentStager):
    def __init__(self) -> None:
        self.attached: dict[str, list[StagedDocument]] = {}
        self.failing_types: set[str] = set()

    async def attach(self, reservation_id: str, document: StagedDocument) -> None:
        await asyncio.sleep(0)
        if document.document_type in self.failing_types:
            raise RuntimeError(f"Upload failed for {document.file_name}")
        self.attached.setdefault(reservation_id, []).append(document)

    def reset(self) -> None:
        self.attached.clear()
        self.failing_types.clear()


class InMemoryPaymentGateway(PaymentGateway):
    """Records every handoff; set ``fail`` to simulate a provider outage."""

    def __init__(self) -> None:
        self.handoffs: list[tuple[str, PaymentHandoff]] = []
        self.fail = False

    async def _start(
        self,
        mode: PaymentMode,
        reservation_id: str,
        amount_cents: int,
        application_fee_cents: int,
    ) -> PaymentHandoff:
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("Payment provider unavailable")
        handoff = PaymentHandoff(
            mode=mode,
            checkout_url=f"{settings.checkout.checkout_base_url}/{reservation_id}",
            amount_cents=amount_cents,
            application_fee_cents=application_fee_cents,
        )
        self.handoffs.append((reservation_id, handoff))
        return handoff

    async def create_checkout(self, reservation_id: str, amount_cents: int, application_fee_cents: int) -> PaymentHandoff:
        return await self._start(PaymentMode.CAPTURE, reservation_id, amount_cents, application_fee_cents)

    async def create_authorization_hold(
        self, reservation_id: str, amount_cents: int, application_fee_cents: int
    ) -> PaymentHandoff:
        return await self._start(
            PaymentMode.AUTHORIZATION_HOLD, reservation_id, amount_cents, application_fee_cents
        )

    def reset(self) -> None:
        self.handoffs.clear()
        self.fail = False
