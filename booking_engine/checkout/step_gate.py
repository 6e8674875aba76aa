"""
Finite state machine for the multi-step booking checkout.

Steps run in a fixed order chosen when the session opens:

    IDENTITY -> [BUSINESS_INFO] -> [DOCUMENTS] -> FULFILLMENT -> REVIEW

A step is reachable only when every step before it is complete. Completion
is always recomputed from the session's inputs and the latest availability
snapshot, so a selection that went stale drops the session back to the
first incomplete step.

Usage:
    gate = BookingStepGate(profile, snapshot, today=date(2026, 9, 20))
    gate.sign_in(RenterIdentity(user_id="u-1"))
    gate.complete_step(CheckoutStep.IDENTITY)
    ...
    result = await gate.submit(collaborators)
"""

import asyncio
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from booking_engine.checkout.guards import CheckoutGuardPipeline
from booking_engine.checkout.requirements import (
    all_documents_staged,
    business_info_payload,
    document_label,
    is_business_info_complete,
    missing_business_fields,
    missing_documents,
)
from booking_engine.collaborators.base import CheckoutCollaborators
from booking_engine.config import settings
from booking_engine.engine.availability import first_unavailable_date, resolve_day_status
from booking_engine.engine.fees import FeeFunction, calculate_rental_fees, to_cents
from booking_engine.engine.hourly import end_hour, windows_for_date
from booking_engine.engine.pricing import build_quote
from booking_engine.engine.slots import find_conflicts, is_slot_free
from booking_engine.exceptions import (
    AvailabilityConflict,
    ConfigurationGap,
    InvalidStepError,
    PaymentHandoffError,
    ValidationError,
)
from booking_engine.logging_context import get_session_logger, set_session_id
from booking_engine.schemas.availability_schema import (
    AvailabilitySnapshot,
    CandidateRange,
    DateRange,
)
from booking_engine.schemas.checkout_schema import (
    BusinessInfo,
    RenterIdentity,
    ReservationRequest,
    StagedDocument,
    SubmitResult,
)
from booking_engine.schemas.listing_schema import FulfillmentMethod, ListingAvailabilityProfile
from booking_engine.schemas.pricing_schema import RentalQuote
from booking_engine.utils import format_hour, normalize_zip

logger = get_session_logger(__name__)


class CheckoutStep(str, Enum):
    """All steps a checkout can contain, in order."""
    IDENTITY = "identity"
    BUSINESS_INFO = "business_info"
    DOCUMENTS = "documents"
    FULFILLMENT = "fulfillment"
    REVIEW = "review"


@dataclass
class StepEntry:
    """Recorded history entry for a step visit."""
    step: CheckoutStep
    entered_at: datetime
    reason: Optional[str] = None


@dataclass(frozen=True)
class StepState:
    step: CheckoutStep
    complete: bool


@dataclass(frozen=True)
class BookingStepState:
    """Read-only view of the session: ordered steps and where the renter is."""
    steps: tuple[StepState, ...]
    current_step: CheckoutStep

    def is_complete(self, step: CheckoutStep) -> bool:
        return any(s.step == step and s.complete for s in self.steps)


class BookingStepGate:
    """
    Sequences one renter's checkout and commits the reservation.

    The gate owns the session's inputs (identity, business info, staged
    documents, date/hour/slot selection, fulfillment) and a point-in-time
    availability snapshot. It is the only component that raises user-facing
    validation and conflict errors.
    """

    def __init__(
        self,
        profile: ListingAvailabilityProfile,
        snapshot: AvailabilitySnapshot,
        *,
        today: date,
        now: Optional[datetime] = None,
        renter: Optional[RenterIdentity] = None,
        fee_function: FeeFunction = calculate_rental_fees,
        session_id: Optional[str] = None,
    ) -> None:
        if snapshot.listing_id != profile.listing_id:
            raise ValueError(
                f"Snapshot is for {snapshot.listing_id}, profile is {profile.listing_id}"
            )
        self.session_id = session_id or f"CHK-{uuid.uuid4().hex[:8]}"
        self._profile = profile
        self._snapshot = snapshot
        self._today = today
        self._now = now
        self._fee_function = fee_function
        self._guards = CheckoutGuardPipeline()

        steps = [CheckoutStep.IDENTITY]
        if profile.requires_business_info:
            steps.append(CheckoutStep.BUSINESS_INFO)
        if profile.has_required_documents:
            steps.append(CheckoutStep.DOCUMENTS)
        steps += [CheckoutStep.FULFILLMENT, CheckoutStep.REVIEW]
        self._steps: tuple[CheckoutStep, ...] = tuple(steps)

        self._renter = renter
        self._business_info: Optional[BusinessInfo] = None
        self._business_confirmed = False
        self._staged: dict[str, StagedDocument] = {}
        self._documents_confirmed = False
        self._candidate: Optional[CandidateRange] = None
        self._slot_number: Optional[int] = None
        self._fulfillment = profile.default_fulfillment()
        self._delivery_address: Optional[str] = None
        self._delivery_zip: Optional[str] = None
        self._terms_accepted = False
        self._message: Optional[str] = None
        self._result: Optional[SubmitResult] = None
        self._pending: Optional[tuple[str, RentalQuote]] = None
        self._attached: set[str] = set()

        self._current = CheckoutStep.IDENTITY
        self._history: list[StepEntry] = [
            StepEntry(step=CheckoutStep.IDENTITY, entered_at=datetime.now(timezone.utc))
        ]

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def profile(self) -> ListingAvailabilityProfile:
        return self._profile

    @property
    def snapshot(self) -> AvailabilitySnapshot:
        return self._snapshot

    @property
    def steps(self) -> tuple[CheckoutStep, ...]:
        return self._steps

    @property
    def current_step(self) -> CheckoutStep:
        return self._current

    @property
    def candidate(self) -> Optional[CandidateRange]:
        return self._candidate

    @property
    def slot_number(self) -> Optional[int]:
        return self._slot_number

    @property
    def fulfillment(self) -> FulfillmentMethod:
        return self._fulfillment

    @property
    def result(self) -> Optional[SubmitResult]:
        return self._result

    @property
    def state(self) -> BookingStepState:
        return BookingStepState(
            steps=tuple(StepState(step=s, complete=self.is_step_complete(s)) for s in self._steps),
            current_step=self._current,
        )

    def get_history(self) -> list[StepEntry]:
        """Return the full step history."""
        return list(self._history)

    def get_step_trace(self) -> list[str]:
        """Return ordered list of step names visited."""
        return [entry.step.value for entry in self._history]

    # ------------------------------------------------------------------
    # Completion predicates and transitions
    # ------------------------------------------------------------------

    def is_step_complete(self, step: CheckoutStep) -> bool:
        if step not in self._steps:
            return False
        if step == CheckoutStep.IDENTITY:
            return self._renter is not None
        if step == CheckoutStep.BUSINESS_INFO:
            return self._business_confirmed and is_business_info_complete(self._business_info)
        if step == CheckoutStep.DOCUMENTS:
            return self._documents_confirmed and all_documents_staged(
                self._profile.required_documents, self._staged
            )
        if step == CheckoutStep.FULFILLMENT:
            return self._fulfillment_complete()
        return self._result is not None

    def can_access_step(self, step: CheckoutStep) -> bool:
        """A step is reachable when it exists and every earlier step is complete."""
        if step not in self._steps:
            return False
        index = self._steps.index(step)
        return all(self.is_step_complete(s) for s in self._steps[:index])

    def go_to(self, step: CheckoutStep) -> CheckoutStep:
        """
        Move to a step.

        Raises:
            InvalidStepError: If the step is absent or a predecessor is incomplete.
        """
        if not self.can_access_step(step):
            blocking = self._first_incomplete_before(step)
            raise InvalidStepError(
                f"Cannot open '{step.value}' from '{self._current.value}'"
                + (f": '{blocking.value}' is not complete" if blocking else ": step not in this checkout"),
                field=step.value,
                user_message="Please finish the previous steps first.",
            )
        self._enter(step, reason="go_to")
        return self._current

    def complete_step(self, step: Optional[CheckoutStep] = None) -> CheckoutStep:
        """
        Confirm a step and advance to the next one.

        Business info and documents need this explicit confirmation on top of
        their field checks. Review is completed by ``submit`` only.

        Returns:
            The new current step.

        Raises:
            InvalidStepError: If the step cannot be entered or is the review step.
            ValidationError: If the step's inputs are incomplete.
        """
        step = step or self._current
        if step == CheckoutStep.REVIEW:
            raise InvalidStepError("Review is completed by submitting", field=step.value)
        if not self.can_access_step(step):
            raise InvalidStepError(f"Step '{step.value}' is not reachable", field=step.value)

        if step == CheckoutStep.BUSINESS_INFO:
            missing = missing_business_fields(self._business_info)
            if missing:
                raise ValidationError(
                    "Missing business details: " + ", ".join(f.display_name for f in missing),
                    field=missing[0].name,
                )
            self._business_confirmed = True
        elif step == CheckoutStep.DOCUMENTS:
            missing_docs = missing_documents(self._profile.required_documents, self._staged)
            if missing_docs:
                raise ValidationError(
                    "Missing documents: " + ", ".join(document_label(d) for d in missing_docs),
                    field="documents",
                )
            self._documents_confirmed = True

        if not self.is_step_complete(step):
            field = self._fulfillment_gap() if step == CheckoutStep.FULFILLMENT else step.value
            raise ValidationError(f"Step '{step.value}' is not complete", field=field)

        next_step = self._steps[self._steps.index(step) + 1]
        self._enter(next_step, reason=f"{step.value}_complete")
        return self._current

    def _first_incomplete_before(self, step: CheckoutStep) -> Optional[CheckoutStep]:
        if step not in self._steps:
            return None
        for s in self._steps[:self._steps.index(step)]:
            if not self.is_step_complete(s):
                return s
        return None

    def _enter(self, step: CheckoutStep, reason: str) -> None:
        old = self._current
        self._current = step
        self._history.append(StepEntry(step=step, entered_at=datetime.now(timezone.utc), reason=reason))
        logger.debug("Checkout step: %s -> %s (%s)", old.value, step.value, reason)

    def _settle(self) -> None:
        """Fall back to the first incomplete step when the current one became unreachable."""
        if self.can_access_step(self._current):
            return
        blocking = self._first_incomplete_before(self._current)
        if blocking is not None:
            self._enter(blocking, reason="requirements_changed")

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def sign_in(self, renter: RenterIdentity) -> None:
        self._renter = renter
        self._settle()

    def sign_out(self) -> None:
        self._renter = None
        self._settle()

    def set_business_info(self, info: Union[BusinessInfo, dict[str, Any]]) -> None:
        """Replace the business profile; the step must be confirmed again."""
        if not isinstance(info, BusinessInfo):
            info = BusinessInfo.model_validate(info)
        self._business_info = info
        self._business_confirmed = False
        self._settle()

    def stage_document(self, document: StagedDocument) -> None:
        self._staged[document.document_type] = document
        self._documents_confirmed = False
        self._settle()

    def remove_document(self, document_type: str) -> None:
        self._staged.pop(document_type, None)
        self._documents_confirmed = False
        self._settle()

    def select_dates(self, start: date, end: date) -> None:
        """
        Choose a date range for a daily rental.

        Raises:
            ValidationError: If daily booking is off or any date in the range
                cannot be selected.
            ConfigurationGap: If daily booking is on but no daily rate is set.
        """
        if not self._profile.daily_enabled:
            raise ValidationError("This listing does not take daily bookings", field="dates")
        if not self._profile.rates.price_daily:
            raise ConfigurationGap(
                f"Listing {self._profile.listing_id} takes daily bookings but has no daily rate",
                user_message="This listing can't be booked by the day yet.",
            )
        try:
            candidate = CandidateRange.for_dates(start, end)
        except ValueError as exc:
            raise ValidationError(str(exc), field="dates") from exc

        blocked = self._first_unavailable(candidate.dates) or self._hourly_clash(candidate)
        if blocked is not None:
            raise ValidationError(
                f"{blocked.isoformat()} is not available",
                field="dates",
                user_message="Some dates in this range are not available.",
            )
        self._set_candidate(candidate)

    def select_hours(self, day: date, start_hour: int, duration: int) -> None:
        """
        Choose hours on a single date.

        Raises:
            ValidationError: If hourly booking is off, the duration is out of
                bounds, or the hours do not fit an open window.
            ConfigurationGap: If hourly booking is on but no hourly rate is set.
        """
        if not self._profile.supports_hourly:
            raise ValidationError("This listing does not take hourly bookings", field="hours")
        if not self._profile.rates.price_hourly:
            raise ConfigurationGap(
                f"Listing {self._profile.listing_id} takes hourly bookings but has no hourly rate",
                user_message="This listing can't be booked by the hour yet.",
            )
        hourly = self._profile.hourly
        if not hourly.min_hours <= duration <= hourly.max_hours:
            raise ValidationError(
                f"Duration must be {hourly.min_hours}-{hourly.max_hours} hours, got {duration}",
                field="duration",
            )
        try:
            candidate = CandidateRange.for_hours(day, start_hour, end_hour(start_hour, duration))
        except ValueError as exc:
            raise ValidationError(str(exc), field="hours") from exc

        if not self._hours_fit(candidate):
            raise ValidationError(
                f"{format_hour(start_hour)} for {duration}h on {day.isoformat()} is not available",
                field="hours",
                user_message="Those hours are not available.",
            )
        self._set_candidate(candidate)

    def clear_selection(self) -> None:
        self._candidate = None
        self._slot_number = None
        self._settle()

    def select_slot(self, slot_number: int) -> None:
        """
        Choose a slot on a multi-slot listing.

        Raises:
            ValidationError: If the slot does not exist or is taken for the
                current selection.
        """
        if not 1 <= slot_number <= self._profile.total_slots:
            raise ValidationError(
                f"Slot {slot_number} does not exist on this listing", field="slot_number"
            )
        if self._candidate is not None and not is_slot_free(
            slot_number, self._candidate, self._snapshot.bookings
        ):
            raise ValidationError(
                f"{self._profile.slot_label(slot_number)} is taken for these dates",
                field="slot_number",
            )
        self._slot_number = slot_number
        self._settle()

    def set_fulfillment(
        self,
        method: FulfillmentMethod,
        delivery_address: Optional[str] = None,
        delivery_zip: Optional[str] = None,
    ) -> None:
        """
        Raises:
            ValidationError: If the listing does not offer the method or the
                ZIP code is malformed.
        """
        if not self._profile.offers(method):
            raise ValidationError(
                f"This listing does not offer {method.value}", field="fulfillment"
            )
        zip_code = None
        if delivery_zip is not None:
            zip_code = normalize_zip(delivery_zip)
            if zip_code is None:
                raise ValidationError(
                    f"'{delivery_zip}' is not a valid ZIP code", field="delivery_zip"
                )
        self._fulfillment = method
        if method == FulfillmentMethod.DELIVERY:
            self._delivery_address = (delivery_address or "").strip() or None
            self._delivery_zip = zip_code
        else:
            self._delivery_address = None
            self._delivery_zip = None
        self._settle()

    def accept_terms(self, accepted: bool = True) -> None:
        self._terms_accepted = accepted
        self._settle()

    def set_message(self, message: Optional[str]) -> None:
        limit = settings.checkout.max_message_length
        if message is not None and len(message) > limit:
            raise ValidationError(f"Message must be at most {limit} characters", field="message")
        self._message = message.strip() if message else None

    def update_snapshot(
        self,
        snapshot: AvailabilitySnapshot,
        *,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Swap in a fresher availability read, and optionally advance the clock."""
        if snapshot.listing_id != self._profile.listing_id:
            raise ValueError(
                f"Snapshot is for {snapshot.listing_id}, profile is {self._profile.listing_id}"
            )
        self._snapshot = snapshot
        if today is not None:
            self._today = today
        if now is not None:
            self._now = now
        self._settle()

    # ------------------------------------------------------------------
    # Selection checks
    # ------------------------------------------------------------------

    def _set_candidate(self, candidate: CandidateRange) -> None:
        self._candidate = candidate
        if self._slot_number is not None and not is_slot_free(
            self._slot_number, candidate, self._snapshot.bookings
        ):
            logger.debug("Slot %d not free for new selection, clearing", self._slot_number)
            self._slot_number = None
        self._settle()

    def _first_unavailable(self, dates: DateRange) -> Optional[date]:
        snap = self._snapshot
        return first_unavailable_date(
            dates, self._profile, snap.blocks, snap.bookings, snap.buffers, self._today
        )

    def _hourly_clash(self, candidate: CandidateRange) -> Optional[date]:
        """First date a single-slot day range shares with an hourly booking."""
        if self._profile.is_multi_slot or candidate.is_hourly:
            return None
        clashes = [b for b in find_conflicts(candidate, self._snapshot.bookings) if b.is_hourly]
        if not clashes:
            return None
        return min(b.start_date for b in clashes)

    def _hours_fit(self, candidate: CandidateRange) -> bool:
        snap = self._snapshot
        day = candidate.dates.start
        status = resolve_day_status(
            day, self._profile, snap.blocks, snap.bookings, snap.buffers, self._today
        )
        windows = windows_for_date(
            day,
            self._profile.hourly,
            total_slots=self._profile.total_slots,
            bookings=snap.bookings,
            now=self._now,
            day_status=status,
        )
        hours = candidate.hours
        return any(
            w.start_hour <= hours.start_hour and hours.end_hour <= w.end_hour
            for w in windows
        )

    def _selection_valid(self) -> bool:
        if self._candidate is None:
            return False
        if self._candidate.is_hourly:
            return self._hours_fit(self._candidate)
        return (
            self._first_unavailable(self._candidate.dates) is None
            and self._hourly_clash(self._candidate) is None
        )

    def _slot_valid(self) -> bool:
        if not self._profile.is_multi_slot:
            return True
        return (
            self._slot_number is not None
            and self._candidate is not None
            and is_slot_free(self._slot_number, self._candidate, self._snapshot.bookings)
        )

    def _fulfillment_gap(self) -> Optional[str]:
        """Name of the first fulfillment input that is missing or stale."""
        if not self._terms_accepted:
            return "terms"
        if self._fulfillment == FulfillmentMethod.DELIVERY and not self._delivery_address:
            return "delivery_address"
        if not self._selection_valid():
            return "hours" if self._candidate is not None and self._candidate.is_hourly else "dates"
        if not self._slot_valid():
            return "slot_number"
        return None

    def _fulfillment_complete(self) -> bool:
        return self._fulfillment_gap() is None

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def delivery_fee(self) -> float:
        if self._fulfillment == FulfillmentMethod.DELIVERY:
            return self._profile.delivery_fee or 0
        return 0

    def quote(self) -> Optional[RentalQuote]:
        """Price of the current selection, or None before anything is selected."""
        if self._candidate is None:
            return None
        return build_quote(
            self._profile,
            self._candidate,
            delivery_fee=self.delivery_fee(),
            fee_function=self._fee_function,
        )

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def _return_to_selection(self) -> None:
        self._slot_number = None
        self._enter(CheckoutStep.FULFILLMENT, reason="availability_conflict")

    def _conflict(self, detail: str) -> AvailabilityConflict:
        logger.warning("Availability conflict on %s: %s", self._profile.listing_id, detail)
        self._return_to_selection()
        return AvailabilityConflict(detail)

    def _build_request(self, quote: RentalQuote) -> ReservationRequest:
        candidate = self._candidate
        hours = candidate.hours
        multi = self._profile.is_multi_slot
        return ReservationRequest(
            listing_id=self._profile.listing_id,
            host_id=self._profile.host_id,
            renter_id=self._renter.user_id,
            start_date=candidate.dates.start,
            end_date=candidate.dates.end,
            start_time=hours.start_hour if hours else None,
            end_time=hours.end_hour if hours else None,
            duration_hours=hours.duration if hours else None,
            slot_number=self._slot_number if multi else None,
            slot_name=self._profile.slot_label(self._slot_number) if multi else None,
            fulfillment=self._fulfillment,
            delivery_address=self._delivery_address,
            delivery_fee_snapshot=self.delivery_fee() or None,
            message=self._message,
            business_info=(
                business_info_payload(self._business_info)
                if CheckoutStep.BUSINESS_INFO in self._steps else None
            ),
            base_price=quote.base_price,
            total_price=quote.total_with_fees,
            deposit_amount=self._profile.deposit_amount,
            is_instant_book=self._profile.instant_book,
        )

    async def submit(self, collaborators: CheckoutCollaborators) -> SubmitResult:
        """
        Commit the reservation and start payment.

        One logical transaction: run the pre-submit guards, re-fetch
        availability, re-validate the selection, persist with the price
        snapshot, attach staged documents, then hand off to payment. The
        call can be cancelled until the reservation is stored; after that
        the remaining steps run to completion.

        Raises:
            InvalidStepError: If review is not reachable or the session was
                already submitted.
            ValidationError: If a pre-submit guard fails.
            AvailabilityConflict: If the selection is no longer free. The
                gate returns to the fulfillment step with the slot cleared.
            PersistenceError: If the store fails for another reason.
            PaymentHandoffError: If payment could not start. The stored
                reservation stays pending and holds its inventory; calling
                submit again resumes payment for it without storing a new one.
        """
        set_session_id(self.session_id, listing_id=self._profile.listing_id)
        if self._result is not None:
            raise InvalidStepError("This checkout was already submitted", field="review")
        if self._pending is not None:
            reservation_id, quote = self._pending
            logger.info("Resuming payment for stored reservation %s", reservation_id)
            return await asyncio.shield(self._after_commit(reservation_id, quote, collaborators))
        if not self.can_access_step(CheckoutStep.REVIEW):
            blocking = self._first_incomplete_before(CheckoutStep.REVIEW)
            raise InvalidStepError(
                f"Cannot submit: '{blocking.value}' is not complete",
                field=self._fulfillment_gap() if blocking == CheckoutStep.FULFILLMENT else blocking.value,
            )

        quote = self.quote()
        failures = self._guards.check_submission(
            renter_id=self._renter.user_id,
            host_id=self._profile.host_id,
            quote=quote,
            method=self._fulfillment,
            delivery_address=self._delivery_address,
            delivery_zip=self._delivery_zip,
            hours=self._candidate.hours.duration if self._candidate.is_hourly else None,
            hourly=self._profile.hourly,
            message=self._message,
        )
        if failures:
            first = failures[0]
            raise ValidationError(
                first.message, field=first.field,
                error_code=first.violation_type, user_message=first.message,
            )

        fresh = await collaborators.availability.fetch_snapshot(
            self._profile.listing_id, self._candidate.dates
        )
        self._snapshot = fresh
        if not self._selection_valid():
            raise self._conflict(f"{self._candidate.dates.start}..{self._candidate.dates.end} taken")
        if not self._slot_valid():
            raise self._conflict(f"slot {self._slot_number} taken")

        request = self._build_request(quote)
        try:
            reservation_id = await collaborators.reservations.create(request)
        except AvailabilityConflict as exc:
            logger.warning("Store rejected overlapping reservation: %s", exc.detail)
            self._return_to_selection()
            raise

        logger.info(
            "Reservation %s committed for %s (%s)",
            reservation_id, self._profile.listing_id, quote.duration_label,
        )
        self._pending = (reservation_id, quote)
        return await asyncio.shield(self._after_commit(reservation_id, quote, collaborators))

    async def _after_commit(
        self,
        reservation_id: str,
        quote: RentalQuote,
        collaborators: CheckoutCollaborators,
    ) -> SubmitResult:
        for document_type, document in self._staged.items():
            if document_type in self._attached:
                continue
            try:
                await collaborators.documents.attach(reservation_id, document)
                self._attached.add(document_type)
            except Exception:
                logger.exception("Failed to attach %s to %s", document.file_name, reservation_id)

        amount_cents = to_cents(quote.total_with_fees)
        fee_cents = to_cents(quote.fees.platform_fee)
        try:
            if self._profile.instant_book:
                handoff = await collaborators.payments.create_checkout(
                    reservation_id, amount_cents, fee_cents
                )
            else:
                handoff = await collaborators.payments.create_authorization_hold(
                    reservation_id, amount_cents, fee_cents
                )
        except Exception as exc:
            logger.warning("Payment handoff failed for %s: %s", reservation_id, exc)
            raise PaymentHandoffError(
                f"Payment could not start for {reservation_id}",
                reservation_id=reservation_id,
                detail=str(exc),
            ) from exc

        self._result = SubmitResult(
            reservation_id=reservation_id,
            handoff=handoff,
            documents_attached=len(self._attached),
        )
        self._pending = None
        self._history.append(StepEntry(
            step=CheckoutStep.REVIEW,
            entered_at=datetime.now(timezone.utc),
            reason="submitted",
        ))
        logger.info("Payment handoff ready for %s (%s)", reservation_id, handoff.mode.value)
        return self._result
