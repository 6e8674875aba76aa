"""Tests for the booking step gate state machine."""

from datetime import date

import pytest

from booking_engine.checkout.step_gate import BookingStepGate, CheckoutStep
from booking_engine.exceptions import ConfigurationGap, InvalidStepError, ValidationError
from booking_engine.schemas import (
    BusinessInfo,
    EmployeeCount,
    FeeBreakdown,
    FulfillmentMethod,
    LicenseType,
    ListingCategory,
    RateCard,
)
from tests.conftest import (
    TODAY,
    complete_business_info,
    make_booking,
    make_document,
    make_profile,
    make_snapshot,
    ready_gate,
)


def new_gate(profile, snapshot=None, **kwargs):
    return BookingStepGate(profile, snapshot or make_snapshot(profile.listing_id), today=TODAY, **kwargs)


class TestStepList:
    def test_minimal_checkout(self, daily_profile):
        gate = new_gate(daily_profile)
        assert gate.steps == (CheckoutStep.IDENTITY, CheckoutStep.FULFILLMENT, CheckoutStep.REVIEW)

    def test_food_truck_with_documents(self, food_truck_profile):
        gate = new_gate(food_truck_profile)
        assert gate.steps == (
            CheckoutStep.IDENTITY,
            CheckoutStep.BUSINESS_INFO,
            CheckoutStep.DOCUMENTS,
            CheckoutStep.FULFILLMENT,
            CheckoutStep.REVIEW,
        )

    def test_business_info_without_documents(self):
        gate = new_gate(make_profile(category=ListingCategory.FOOD_TRAILER))
        assert CheckoutStep.BUSINESS_INFO in gate.steps
        assert CheckoutStep.DOCUMENTS not in gate.steps

    def test_snapshot_must_match_listing(self, daily_profile):
        with pytest.raises(ValueError, match="Snapshot"):
            BookingStepGate(daily_profile, make_snapshot("other"), today=TODAY)


class TestInitialState:
    def test_starts_at_identity(self, daily_profile):
        gate = new_gate(daily_profile)
        assert gate.current_step == CheckoutStep.IDENTITY
        assert gate.get_step_trace() == ["identity"]

    def test_later_steps_unreachable(self, daily_profile):
        gate = new_gate(daily_profile)
        assert gate.can_access_step(CheckoutStep.IDENTITY)
        assert not gate.can_access_step(CheckoutStep.FULFILLMENT)
        assert not gate.can_access_step(CheckoutStep.REVIEW)

    def test_go_to_unreachable_step_rejected(self, daily_profile):
        gate = new_gate(daily_profile)
        with pytest.raises(InvalidStepError) as exc_info:
            gate.go_to(CheckoutStep.REVIEW)
        assert exc_info.value.error_code == "step_not_reachable"
        assert exc_info.value.field == "review"

    def test_absent_step_never_reachable(self, daily_profile, renter):
        gate = new_gate(daily_profile, renter=renter)
        assert not gate.can_access_step(CheckoutStep.DOCUMENTS)
        with pytest.raises(InvalidStepError):
            gate.go_to(CheckoutStep.DOCUMENTS)

    def test_state_view(self, daily_profile, renter):
        gate = new_gate(daily_profile, renter=renter)
        state = gate.state
        assert state.current_step == CheckoutStep.IDENTITY
        assert state.is_complete(CheckoutStep.IDENTITY)
        assert not state.is_complete(CheckoutStep.FULFILLMENT)


class TestIdentity:
    def test_sign_in_completes_identity(self, daily_profile, renter):
        gate = new_gate(daily_profile)
        assert not gate.is_step_complete(CheckoutStep.IDENTITY)
        gate.sign_in(renter)
        assert gate.is_step_complete(CheckoutStep.IDENTITY)
        assert gate.complete_step() == CheckoutStep.FULFILLMENT

    def test_complete_without_identity_rejected(self, daily_profile):
        gate = new_gate(daily_profile)
        with pytest.raises(ValidationError):
            gate.complete_step(CheckoutStep.IDENTITY)

    def test_sign_out_falls_back(self, daily_profile, renter):
        gate = new_gate(daily_profile, renter=renter)
        gate.complete_step()
        gate.sign_out()
        assert gate.current_step == CheckoutStep.IDENTITY


class TestBusinessInfo:
    def gate_at_business_info(self, profile, renter):
        gate = new_gate(profile, renter=renter)
        gate.complete_step(CheckoutStep.IDENTITY)
        return gate

    def test_complete_info_needs_confirmation(self, food_truck_profile, renter):
        gate = self.gate_at_business_info(food_truck_profile, renter)
        gate.set_business_info(complete_business_info())
        assert not gate.is_step_complete(CheckoutStep.BUSINESS_INFO)
        assert gate.complete_step() == CheckoutStep.DOCUMENTS
        assert gate.is_step_complete(CheckoutStep.BUSINESS_INFO)

    def test_missing_fields_listed(self, food_truck_profile, renter):
        gate = self.gate_at_business_info(food_truck_profile, renter)
        gate.set_business_info({"license_type": "llc", "intended_use": "Events"})
        with pytest.raises(ValidationError) as exc_info:
            gate.complete_step()
        assert "number of employees" in str(exc_info.value)
        assert "cuisine type" in str(exc_info.value)
        assert exc_info.value.field == "employee_count"

    def test_other_license_needs_description(self, food_truck_profile, renter):
        gate = self.gate_at_business_info(food_truck_profile, renter)
        info = BusinessInfo(
            license_type=LicenseType.OTHER,
            employee_count=EmployeeCount.JUST_ME,
            intended_use="Pop-up",
            cuisine_type="Coffee",
        )
        gate.set_business_info(info)
        with pytest.raises(ValidationError) as exc_info:
            gate.complete_step()
        assert exc_info.value.field == "license_type_other"

    def test_whitespace_counts_as_empty(self, food_truck_profile, renter):
        gate = self.gate_at_business_info(food_truck_profile, renter)
        gate.set_business_info(complete_business_info().model_copy(update={"cuisine_type": "   "}))
        with pytest.raises(ValidationError):
            gate.complete_step()

    def test_editing_requires_reconfirmation(self, food_truck_profile, renter):
        gate = self.gate_at_business_info(food_truck_profile, renter)
        gate.set_business_info(complete_business_info())
        gate.complete_step()
        gate.set_business_info(complete_business_info())
        assert gate.current_step == CheckoutStep.BUSINESS_INFO


class TestDocumentGating:
    def test_review_blocked_until_all_documents_staged(self, food_truck_profile, renter):
        gate = new_gate(food_truck_profile, renter=renter)
        gate.complete_step(CheckoutStep.IDENTITY)
        gate.set_business_info(complete_business_info())
        gate.complete_step(CheckoutStep.BUSINESS_INFO)
        gate.stage_document(make_document("drivers_license"))

        assert not gate.can_access_step(CheckoutStep.REVIEW)
        assert not gate.can_access_step(CheckoutStep.FULFILLMENT)
        with pytest.raises(ValidationError, match="Food Handler's Certificate"):
            gate.complete_step(CheckoutStep.DOCUMENTS)

        gate.stage_document(make_document("food_handler_certificate"))
        assert gate.complete_step(CheckoutStep.DOCUMENTS) == CheckoutStep.FULFILLMENT

    def test_removing_document_reopens_step(self, food_truck_profile, renter):
        gate = ready_gate(food_truck_profile, renter)
        assert gate.current_step == CheckoutStep.REVIEW
        gate.remove_document("drivers_license")
        assert gate.current_step == CheckoutStep.DOCUMENTS
        assert not gate.can_access_step(CheckoutStep.REVIEW)


class TestFulfillment:
    def gate_at_fulfillment(self, profile, renter, snapshot=None):
        gate = new_gate(profile, snapshot, renter=renter)
        gate.complete_step(CheckoutStep.IDENTITY)
        return gate

    def test_requires_terms_and_dates(self, daily_profile, renter):
        gate = self.gate_at_fulfillment(daily_profile, renter)
        with pytest.raises(ValidationError) as exc_info:
            gate.complete_step()
        assert exc_info.value.field == "terms"

        gate.accept_terms()
        with pytest.raises(ValidationError) as exc_info:
            gate.complete_step()
        assert exc_info.value.field == "dates"

        gate.select_dates(date(2026, 10, 1), date(2026, 10, 8))
        assert gate.complete_step() == CheckoutStep.REVIEW

    def test_unavailable_dates_rejected(self, daily_profile, renter):
        snapshot = make_snapshot(bookings=(make_booking(date(2026, 10, 5), date(2026, 10, 6)),))
        gate = self.gate_at_fulfillment(daily_profile, renter, snapshot)
        with pytest.raises(ValidationError) as exc_info:
            gate.select_dates(date(2026, 10, 1), date(2026, 10, 8))
        assert exc_info.value.field == "dates"
        assert gate.candidate is None

    def test_reversed_dates_rejected(self, daily_profile, renter):
        gate = self.gate_at_fulfillment(daily_profile, renter)
        with pytest.raises(ValidationError):
            gate.select_dates(date(2026, 10, 8), date(2026, 10, 1))

    def test_delivery_needs_address(self, food_truck_profile, renter):
        gate = ready_gate(food_truck_profile, renter)
        gate.set_fulfillment(FulfillmentMethod.DELIVERY)
        assert gate.current_step == CheckoutStep.FULFILLMENT
        assert not gate.is_step_complete(CheckoutStep.FULFILLMENT)

        gate.set_fulfillment(FulfillmentMethod.DELIVERY, "12 Main St, Austin TX", "78701")
        assert gate.is_step_complete(CheckoutStep.FULFILLMENT)

    def test_malformed_zip_rejected(self, food_truck_profile, renter):
        gate = ready_gate(food_truck_profile, renter)
        with pytest.raises(ValidationError) as exc_info:
            gate.set_fulfillment(FulfillmentMethod.DELIVERY, "12 Main St", "787")
        assert exc_info.value.field == "delivery_zip"

    def test_method_not_offered(self, daily_profile, renter):
        gate = self.gate_at_fulfillment(daily_profile, renter)
        assert gate.fulfillment == FulfillmentMethod.ON_SITE
        with pytest.raises(ValidationError):
            gate.set_fulfillment(FulfillmentMethod.DELIVERY, "12 Main St")

    def test_multi_slot_needs_slot(self, multi_slot_profile, renter):
        gate = self.gate_at_fulfillment(multi_slot_profile, renter, make_snapshot("L-200"))
        gate.select_dates(date(2026, 10, 7), date(2026, 10, 9))
        gate.accept_terms()
        with pytest.raises(ValidationError) as exc_info:
            gate.complete_step()
        assert exc_info.value.field == "slot_number"
        gate.select_slot(2)
        assert gate.complete_step() == CheckoutStep.REVIEW

    def test_taken_slot_rejected(self, multi_slot_profile, renter):
        snapshot = make_snapshot("L-200", bookings=(make_booking(date(2026, 10, 5), date(2026, 10, 10), slot=1),))
        gate = self.gate_at_fulfillment(multi_slot_profile, renter, snapshot)
        gate.select_dates(date(2026, 10, 7), date(2026, 10, 9))
        with pytest.raises(ValidationError, match="Corner"):
            gate.select_slot(1)
        gate.select_slot(2)
        assert gate.slot_number == 2

    def test_unknown_slot_rejected(self, multi_slot_profile, renter):
        gate = self.gate_at_fulfillment(multi_slot_profile, renter, make_snapshot("L-200"))
        with pytest.raises(ValidationError):
            gate.select_slot(3)

    def test_new_dates_clear_a_taken_slot(self, multi_slot_profile, renter):
        snapshot = make_snapshot("L-200", bookings=(make_booking(date(2026, 10, 20), slot=1),))
        gate = self.gate_at_fulfillment(multi_slot_profile, renter, snapshot)
        gate.select_dates(date(2026, 10, 7), date(2026, 10, 9))
        gate.select_slot(1)
        gate.select_dates(date(2026, 10, 19), date(2026, 10, 21))
        assert gate.slot_number is None

    def test_stale_snapshot_drops_back_from_review(self, multi_slot_profile, renter):
        gate = ready_gate(multi_slot_profile, renter, date(2026, 10, 7), date(2026, 10, 9), slot=1,
                          snapshot=make_snapshot("L-200"))
        assert gate.current_step == CheckoutStep.REVIEW
        gate.update_snapshot(make_snapshot("L-200", bookings=(make_booking(date(2026, 10, 8), slot=1),)))
        assert gate.current_step == CheckoutStep.FULFILLMENT
        assert not gate.can_access_step(CheckoutStep.REVIEW)

    def test_hourly_booking_blocks_full_day_on_single_slot(self, renter):
        profile = make_profile(rates=RateCard(price_daily=100, price_hourly=25), hourly_enabled=True)
        hourly = make_booking(date(2026, 10, 3), start_time=10, end_time=12)
        gate = self.gate_at_fulfillment(profile, renter, make_snapshot(bookings=(hourly,)))
        with pytest.raises(ValidationError) as exc_info:
            gate.select_dates(date(2026, 10, 1), date(2026, 10, 8))
        assert "2026-10-03" in str(exc_info.value)
        gate.select_dates(date(2026, 10, 4), date(2026, 10, 8))
        assert gate.candidate is not None

    def test_new_hourly_booking_drops_full_day_back_from_review(self, renter):
        profile = make_profile(rates=RateCard(price_daily=100, price_hourly=25), hourly_enabled=True)
        gate = ready_gate(profile, renter)
        assert gate.can_access_step(CheckoutStep.REVIEW)
        hourly = make_booking(date(2026, 10, 3), start_time=10, end_time=12)
        gate.update_snapshot(make_snapshot(bookings=(hourly,)))
        assert not gate.is_step_complete(CheckoutStep.FULFILLMENT)
        assert not gate.can_access_step(CheckoutStep.REVIEW)

    def test_message_length(self, daily_profile, renter):
        gate = self.gate_at_fulfillment(daily_profile, renter)
        gate.set_message("  See you Saturday  ")
        with pytest.raises(ValidationError) as exc_info:
            gate.set_message("x" * 5000)
        assert exc_info.value.field == "message"


class TestHourlySelection:
    def gate(self, profile, renter):
        gate = new_gate(profile, make_snapshot("L-300"), renter=renter)
        gate.complete_step(CheckoutStep.IDENTITY)
        return gate

    def test_select_hours(self, hourly_profile, renter):
        gate = self.gate(hourly_profile, renter)
        gate.select_hours(date(2026, 10, 5), 15, 2)
        assert gate.candidate.hours.end_hour == 17
        gate.accept_terms()
        assert gate.complete_step() == CheckoutStep.REVIEW
        assert gate.quote().base_price == 50

    def test_duration_past_window_end_rejected(self, hourly_profile, renter):
        gate = self.gate(hourly_profile, renter)
        with pytest.raises(ValidationError) as exc_info:
            gate.select_hours(date(2026, 10, 5), 15, 3)
        assert exc_info.value.field == "hours"
        assert str(exc_info.value) == "15:00 for 3h on 2026-10-05 is not available"

    @pytest.mark.parametrize("duration", [1, 7])
    def test_duration_bounds(self, hourly_profile, renter, duration):
        gate = self.gate(hourly_profile, renter)
        with pytest.raises(ValidationError) as exc_info:
            gate.select_hours(date(2026, 10, 5), 9, duration)
        assert exc_info.value.field == "duration"

    def test_daily_selection_refused_for_hourly_only_listing(self, hourly_profile, renter):
        gate = self.gate(hourly_profile, renter)
        with pytest.raises(ValidationError):
            gate.select_dates(date(2026, 10, 5), date(2026, 10, 6))

    def test_hourly_selection_refused_for_daily_listing(self, daily_profile, renter):
        gate = new_gate(daily_profile, renter=renter)
        with pytest.raises(ValidationError):
            gate.select_hours(date(2026, 10, 5), 9, 2)

    def test_daily_enabled_without_daily_rate(self, renter):
        profile = make_profile(rates=RateCard(price_hourly=25))
        gate = new_gate(profile, renter=renter)
        with pytest.raises(ConfigurationGap) as exc_info:
            gate.select_dates(date(2026, 10, 5), date(2026, 10, 6))
        assert exc_info.value.user_message == "This listing can't be booked by the day yet."

    def test_hourly_enabled_without_hourly_rate(self, renter):
        profile = make_profile(hourly_enabled=True)
        gate = new_gate(profile, renter=renter)
        with pytest.raises(ConfigurationGap):
            gate.select_hours(date(2026, 10, 5), 9, 2)


class TestQuote:
    def test_no_selection_no_quote(self, daily_profile):
        assert new_gate(daily_profile).quote() is None

    def test_daily_booking_scenario(self, daily_profile, renter):
        gate = ready_gate(daily_profile, renter)
        quote = gate.quote()
        assert quote.base_price == 600
        assert quote.breakdown == "1 week @ $600"

    def test_delivery_fee_only_when_delivering(self, food_truck_profile, renter):
        gate = ready_gate(food_truck_profile, renter, date(2026, 10, 1), date(2026, 10, 2))
        assert gate.quote().fees.subtotal == 200
        gate.set_fulfillment(FulfillmentMethod.DELIVERY, "12 Main St", "78701")
        assert gate.quote().fees.subtotal == 275

    def test_injected_fee_function(self, renter):
        def no_fees(base_price, delivery_fee):
            subtotal = base_price + delivery_fee
            return FeeBreakdown(
                subtotal=subtotal, renter_fee=0, host_fee=0,
                customer_total=subtotal, seller_payout=subtotal,
            )

        profile = make_profile(rates=RateCard(price_daily=80))
        gate = new_gate(profile, renter=renter, fee_function=no_fees)
        gate.select_dates(date(2026, 10, 1), date(2026, 10, 3))
        assert gate.quote().total_with_fees == 160


class TestHistory:
    def test_trace_records_each_step(self, daily_profile, renter):
        gate = ready_gate(daily_profile, renter)
        assert gate.get_step_trace() == ["identity", "fulfillment", "review"]
        reasons = [entry.reason for entry in gate.get_history()]
        assert reasons == [None, "identity_complete", "fulfillment_complete"]

    def test_go_back_to_completed_step(self, daily_profile, renter):
        gate = ready_gate(daily_profile, renter)
        gate.go_to(CheckoutStep.IDENTITY)
        assert gate.current_step == CheckoutStep.IDENTITY
        assert gate.can_access_step(CheckoutStep.REVIEW)

    def test_review_not_completed_by_complete_step(self, daily_profile, renter):
        gate = ready_gate(daily_profile, renter)
        with pytest.raises(InvalidStepError):
            gate.complete_step(CheckoutStep.REVIEW)
