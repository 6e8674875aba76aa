"""
Fee engine: base price plus delivery surcharge to renter fee, host
commission, customer total and payout.

The commission formula is a business rule owned outside the resolvers, so
``compute_fees`` takes it as an injected function of
``(base_price, delivery_fee)``. ``calculate_rental_fees`` is the platform
default.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

from booking_engine.config import settings
from booking_engine.schemas.pricing_schema import FeeBreakdown

logger = logging.getLogger(__name__)

FeeFunction = Callable[[float, float], FeeBreakdown]

_CENT = Decimal("0.01")


def round_cents(amount: float) -> float:
    """Round half-up to the cent."""
    return float(Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def to_cents(amount: float) -> int:
    """Convert a dollar amount to integer cents."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_rental_fees(base_price: float, delivery_fee: float = 0) -> FeeBreakdown:
    """Default rental fee rule: percentage fees on both sides of base + delivery."""
    subtotal = round_cents(base_price + delivery_fee)
    renter_fee = round_cents(subtotal * settings.pricing.renter_fee_percent / 100)
    host_fee = round_cents(subtotal * settings.pricing.host_fee_percent / 100)
    return FeeBreakdown(
        subtotal=subtotal,
        renter_fee=renter_fee,
        host_fee=host_fee,
        customer_total=round_cents(subtotal + renter_fee),
        seller_payout=round_cents(subtotal - host_fee),
    )


def compute_fees(
    base_price: float,
    delivery_fee: float = 0,
    *,
    deposit: float = 0,
    fee_function: FeeFunction = calculate_rental_fees,
) -> FeeBreakdown:
    """
    Compute the fee split for a quote.

    Args:
        base_price: Rental price from the tiered pricing calculator.
        delivery_fee: Freight/delivery surcharge, 0 for pickup or on-site.
        deposit: Refundable deposit collected with the payment; it is added
            to the customer total but never earns a fee.
        fee_function: Injected business rule, deterministic and side-effect free.

    Raises:
        ValueError: If any amount is negative.
    """
    for name, value in (("base_price", base_price), ("delivery_fee", delivery_fee), ("deposit", deposit)):
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")

    fees = fee_function(base_price, delivery_fee)
    if deposit:
        fees = fees.model_copy(update={
            "deposit": round_cents(deposit),
            "customer_total": round_cents(fees.customer_total + deposit),
        })
    logger.debug(
        "Fees for base %.2f + delivery %.2f: renter %.2f, host %.2f, total %.2f",
        base_price, delivery_fee, fees.renter_fee, fees.host_fee, fees.customer_total,
    )
    return fees
