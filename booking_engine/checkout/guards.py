"""
Pre-submit checks for a checkout session.

Each guard checks one concern and returns a GuardResult:
1. OwnershipGuard  - hosts cannot book their own listing
2. QuoteGuard      - the price must be non-zero
3. FulfillmentGuard - delivery address and ZIP shape
4. DurationGuard   - hourly bookings stay within min/max hours
5. MessageGuard    - note to the host stays under the length limit

CheckoutGuardPipeline runs them all and returns only the failures.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from booking_engine.config import settings
from booking_engine.schemas.listing_schema import FulfillmentMethod, HourlySettings
from booking_engine.schemas.pricing_schema import RentalQuote
from booking_engine.utils import normalize_zip

logger = logging.getLogger(__name__)


@dataclass
class GuardResult:
    """Outcome of a single guard check."""
    passed: bool
    violation_type: Optional[str] = None
    message: Optional[str] = None
    field: Optional[str] = None


_PASSED = GuardResult(passed=True)


class OwnershipGuard:
    def check(self, renter_id: Optional[str], host_id: str) -> GuardResult:
        if renter_id is not None and renter_id == host_id:
            logger.warning("Host %s tried to book their own listing", host_id)
            return GuardResult(
                passed=False,
                violation_type="own_listing",
                message="You cannot book your own listing.",
                field="renter_id",
            )
        return _PASSED


class QuoteGuard:
    def check(self, quote: Optional[RentalQuote]) -> GuardResult:
        if quote is None or not quote.is_payable:
            return GuardResult(
                passed=False,
                violation_type="zero_quote",
                message="This selection has no price. Choose dates or hours again.",
                field="dates",
            )
        return _PASSED


class FulfillmentGuard:
    def check_address(self, method: FulfillmentMethod, address: Optional[str]) -> GuardResult:
        if method == FulfillmentMethod.DELIVERY and not (address and address.strip()):
            return GuardResult(
                passed=False,
                violation_type="missing_delivery_address",
                message="A delivery address is required.",
                field="delivery_address",
            )
        return _PASSED

    def check_zip(self, zip_code: Optional[str]) -> GuardResult:
        if zip_code is not None and normalize_zip(zip_code) is None:
            return GuardResult(
                passed=False,
                violation_type="malformed_zip",
                message=f"'{zip_code}' is not a valid ZIP code.",
                field="delivery_zip",
            )
        return _PASSED


class DurationGuard:
    def check(self, hours: Optional[int], hourly: HourlySettings) -> GuardResult:
        if hours is None:
            return _PASSED
        if not hourly.min_hours <= hours <= hourly.max_hours:
            return GuardResult(
                passed=False,
                violation_type="duration_out_of_bounds",
                message=(
                    f"Bookings must be {hourly.min_hours}-{hourly.max_hours} hours, "
                    f"got {hours}."
                ),
                field="duration",
            )
        return _PASSED


class MessageGuard:
    def check(self, message: Optional[str]) -> GuardResult:
        limit = settings.checkout.max_message_length
        if message is not None and len(message) > limit:
            return GuardResult(
                passed=False,
                violation_type="message_too_long",
                message=f"Message must be at most {limit} characters.",
                field="message",
            )
        return _PASSED


class CheckoutGuardPipeline:
    """Composes all guards into a single pre-submit check."""

    def __init__(self) -> None:
        self.ownership = OwnershipGuard()
        self.quote = QuoteGuard()
        self.fulfillment = FulfillmentGuard()
        self.duration = DurationGuard()
        self.message = MessageGuard()

    def check_submission(
        self,
        *,
        renter_id: Optional[str],
        host_id: str,
        quote: Optional[RentalQuote],
        method: FulfillmentMethod,
        delivery_address: Optional[str],
        delivery_zip: Optional[str],
        hours: Optional[int],
        hourly: HourlySettings,
        message: Optional[str],
    ) -> list[GuardResult]:
        results = [
            self.ownership.check(renter_id, host_id),
            self.quote.check(quote),
            self.fulfillment.check_address(method, delivery_address),
            self.fulfillment.check_zip(delivery_zip),
            self.duration.check(hours, hourly),
            self.message.check(message),
        ]
        return [r for r in results if not r.passed]
