"""
Tiered pricing calculator.

Day-based rentals are decomposed greedily into months, then weeks, then
days, using the largest billing unit the rate card offers. Hourly rentals
are a flat hours x rate product.

Usage:
    result = price_for_duration(37, RateCard(price_daily=10, price_weekly=60, price_monthly=200))
    result.breakdown  # "1 month @ $200 + 1 week @ $60"
"""

import logging
from datetime import date
from typing import Optional

from booking_engine.config import settings
from booking_engine.engine.fees import FeeFunction, calculate_rental_fees, compute_fees, round_cents
from booking_engine.schemas.availability_schema import CandidateRange
from booking_engine.schemas.listing_schema import ListingAvailabilityProfile, RateCard
from booking_engine.schemas.pricing_schema import PriceResult, PricingMode, RentalQuote
from booking_engine.utils import format_currency, pluralize

logger = logging.getLogger(__name__)


def _line(count: int, unit: str, rate: float, covers: Optional[int] = None) -> str:
    line = f"{pluralize(count, unit)} @ {format_currency(rate)}"
    if covers is not None:
        line += f" (covers {pluralize(covers, 'day')})"
    return line


def price_for_duration(days: int, rate_card: RateCard) -> PriceResult:
    """
    Price a stay of ``days`` using month -> week -> day tiers.

    A missing tier is skipped and its days fall through to the next smaller
    one. When the days left over below a tier would cost more than one more
    unit of that tier, the tier unit is used instead, so the total never
    drops as the stay gets longer. A substituted line says how many days
    it covers, e.g. "1 month @ $200 (covers 29 days)".

    Returns a zero result with an empty breakdown for ``days <= 0`` or a
    missing daily rate; callers must not submit a zero quote.
    """
    daily = rate_card.price_daily
    if not daily or days <= 0:
        return PriceResult()

    weekly = rate_card.price_weekly or 0
    monthly = rate_card.price_monthly or 0
    month_len = settings.pricing.days_per_month
    week_len = settings.pricing.days_per_week

    months, remaining = divmod(days, month_len) if monthly else (0, days)
    weeks, extra_days = divmod(remaining, week_len) if weekly else (0, remaining)

    month_covers = week_covers = None
    if weekly and extra_days and extra_days * daily > weekly:
        weeks, extra_days = weeks + 1, 0
        week_covers = remaining
    if monthly and remaining and weeks * weekly + extra_days * daily > monthly:
        months, weeks, extra_days = months + 1, 0, 0
        month_covers, week_covers = days, None

    parts = []
    total = 0.0
    if months:
        total += months * monthly
        parts.append(_line(months, "month", monthly, month_covers))
    if weeks:
        total += weeks * weekly
        parts.append(_line(weeks, "week", weekly, week_covers))
    if extra_days:
        total += extra_days * daily
        parts.append(_line(extra_days, "day", daily))

    return PriceResult(total=round_cents(total), breakdown=" + ".join(parts))


def price_for_hours(hours: int, hourly_rate: Optional[float]) -> PriceResult:
    """Hourly pricing has no tiering: hours x rate."""
    if not hourly_rate or hours <= 0:
        return PriceResult()
    return PriceResult(
        total=round_cents(hours * hourly_rate),
        breakdown=_line(hours, "hour", hourly_rate),
    )


def rental_days(start: date, end: date) -> int:
    """Billable days between two dates: nights, with a same-day rental counted as one."""
    if end < start:
        return 0
    return max((end - start).days, 1)


def build_quote(
    profile: ListingAvailabilityProfile,
    candidate: CandidateRange,
    *,
    delivery_fee: float = 0,
    slot_count: int = 1,
    fee_function: FeeFunction = calculate_rental_fees,
) -> RentalQuote:
    """Price a candidate selection and run it through the fee engine.

    Raises:
        ValueError: If ``slot_count`` is outside ``1..profile.total_slots``.
    """
    if not 1 <= slot_count <= profile.total_slots:
        raise ValueError(f"slot_count must be within 1..{profile.total_slots}, got {slot_count}")

    if candidate.is_hourly:
        mode = PricingMode.HOURLY
        duration = candidate.hours.duration
        result = price_for_hours(duration, profile.rates.price_hourly)
        label = pluralize(duration, "hour")
    else:
        mode = PricingMode.DAILY
        duration = rental_days(candidate.dates.start, candidate.dates.end)
        result = price_for_duration(duration, profile.rates)
        label = pluralize(duration, "day")

    base_price = result.total
    breakdown = result.breakdown
    if slot_count > 1:
        base_price = round_cents(base_price * slot_count)
        breakdown = f"{breakdown} × {slot_count} slots"

    fees = compute_fees(
        base_price,
        delivery_fee,
        deposit=profile.deposit_amount or 0,
        fee_function=fee_function,
    )
    logger.debug("Quote for %s: %s -> %.2f", profile.listing_id, label, fees.customer_total)
    return RentalQuote(
        mode=mode,
        duration=duration,
        duration_label=label,
        base_price=base_price,
        breakdown=breakdown,
        service_fee=fees.renter_fee,
        total_with_fees=fees.customer_total,
        fees=fees,
    )
