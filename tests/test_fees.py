"""Tests for the fee engine."""

import pytest

from booking_engine.engine.fees import calculate_rental_fees, compute_fees, round_cents, to_cents
from booking_engine.schemas import FeeBreakdown


class TestCalculateRentalFees:
    def test_percentages_on_base(self):
        fees = calculate_rental_fees(100)
        assert fees.subtotal == 100
        assert fees.renter_fee == 12.9
        assert fees.host_fee == 12.9
        assert fees.customer_total == 112.9
        assert fees.seller_payout == 87.1
        assert fees.platform_fee == 25.8

    def test_delivery_fee_included_in_subtotal(self):
        fees = calculate_rental_fees(100, 50)
        assert fees.subtotal == 150
        assert fees.renter_fee == 19.35
        assert fees.customer_total == 169.35
        assert fees.seller_payout == 130.65

    def test_zero_base(self):
        fees = calculate_rental_fees(0)
        assert fees.customer_total == 0
        assert fees.seller_payout == 0

    def test_monotonic_in_base_price(self):
        totals = [calculate_rental_fees(base).customer_total for base in range(0, 2000, 37)]
        assert totals == sorted(totals)


class TestComputeFees:
    def test_defaults_to_rental_rule(self):
        assert compute_fees(100) == calculate_rental_fees(100)

    def test_deposit_added_without_fee(self):
        fees = compute_fees(100, deposit=500)
        assert fees.deposit == 500
        assert fees.renter_fee == 12.9
        assert fees.customer_total == 612.9

    def test_injected_fee_function(self):
        def flat_fee(base_price, delivery_fee):
            subtotal = base_price + delivery_fee
            return FeeBreakdown(
                subtotal=subtotal,
                renter_fee=5,
                host_fee=0,
                customer_total=subtotal + 5,
                seller_payout=subtotal,
            )

        fees = compute_fees(100, 20, fee_function=flat_fee)
        assert fees.renter_fee == 5
        assert fees.customer_total == 125

    @pytest.mark.parametrize("base,delivery,deposit", [(-1, 0, 0), (10, -5, 0), (10, 0, -100)])
    def test_negative_amounts_rejected(self, base, delivery, deposit):
        with pytest.raises(ValueError, match="must be >= 0"):
            compute_fees(base, delivery, deposit=deposit)


class TestCents:
    def test_round_half_up(self):
        assert round_cents(0.125) == 0.13
        assert round_cents(2.675) == 2.68

    def test_to_cents(self):
        assert to_cents(677.4) == 67740
        assert to_cents(0.005) == 1
        assert to_cents(0) == 0
