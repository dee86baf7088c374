"""Tests for amount-due calculation."""

from decimal import Decimal

import pytest

from courtside.payment.pricing import (
    PriceCalculator,
    VoucherNotApplicableError,
    accepts_equipment,
    accepts_voucher,
    apply_voucher,
)
from courtside.schemas.booking_schema import CourtSlotTarget, EventTarget, ReplacementSessionTarget
from courtside.schemas.payment_schema import EquipmentSelection
from courtside.sessions.aggregator import group_sessions
from tests.conftest import make_occurrence, make_voucher, make_weekly_course


@pytest.fixture
def court():
    return CourtSlotTarget(slot_ids=(1, 2), price=Decimal("80"))


class TestComputeTotal:
    def test_court_with_paddles_and_percentage_voucher(self, calculator):
        # (80 + 2*5) * 0.9
        target = CourtSlotTarget(slot_ids=(1,), price=Decimal("80"))
        total = calculator.compute_total(
            target,
            EquipmentSelection(num_paddles=2),
            make_voucher(discount_type="PERCENTAGE", discount_value="10"),
        )
        assert total == Decimal("81.00")

    def test_court_with_ball_set_and_fixed_voucher(self, calculator):
        target = CourtSlotTarget(slot_ids=(1,), price=Decimal("80"))
        total = calculator.compute_total(
            target,
            EquipmentSelection(buy_ball_set=True),
            make_voucher(discount_type="FIXED", discount_value="10"),
        )
        assert total == Decimal("82.00")

    def test_fixed_voucher_never_goes_negative(self, calculator):
        target = CourtSlotTarget(slot_ids=(1,), price=Decimal("50"))
        total = calculator.compute_total(
            target, voucher=make_voucher(discount_type="FIXED", discount_value="70")
        )
        assert total == Decimal("0.00")

    def test_group_with_paddles_and_ball_set(self, calculator):
        group = group_sessions(make_weekly_course(weeks=3, price="20"))[0]
        total = calculator.compute_total(
            group, EquipmentSelection(num_paddles=2, buy_ball_set=True)
        )
        assert total == Decimal("82.00")

    def test_recurring_group_sums_occurrence_prices(self, calculator):
        group = group_sessions(make_weekly_course(weeks=4, price="25"))[0]
        assert calculator.compute_total(group) == Decimal("100.00")

    def test_class_equipment_added(self, calculator):
        group = group_sessions([make_occurrence(price="40")])[0]
        total = calculator.compute_total(
            group, EquipmentSelection(num_paddles=1, buy_ball_set=True)
        )
        assert total == Decimal("57.00")

    def test_event_ignores_equipment(self, calculator):
        total = calculator.compute_total(
            EventTarget(event_id=5, fee="30"), EquipmentSelection(num_paddles=3)
        )
        assert total == Decimal("30.00")

    def test_voucher_on_class_rejected(self, calculator):
        group = group_sessions([make_occurrence()])[0]
        with pytest.raises(VoucherNotApplicableError):
            calculator.compute_total(group, voucher=make_voucher())

    def test_voucher_on_replacement_rejected(self, calculator):
        target = ReplacementSessionTarget(session_id=3, amount="20")
        with pytest.raises(VoucherNotApplicableError):
            calculator.compute_total(target, voucher=make_voucher())

    def test_same_inputs_same_total(self, calculator, court):
        equipment = EquipmentSelection(num_paddles=1)
        assert calculator.compute_total(court, equipment) == calculator.compute_total(court, equipment)

    def test_unit_prices_default_to_config(self):
        calc = PriceCalculator()
        assert calc.paddle_unit_price == Decimal("5.00")
        assert calc.ball_set_price == Decimal("12.00")


class TestApplyVoucher:
    def test_percentage_rounds_half_up(self):
        result = apply_voucher(Decimal("10.05"), make_voucher(discount_value="50"))
        assert result == Decimal("5.03")

    def test_hundred_percent_is_free(self):
        result = apply_voucher(Decimal("45.00"), make_voucher(discount_value="100"))
        assert result == Decimal("0.00")


class TestTargetRules:
    def test_only_court_accepts_voucher(self, court):
        assert accepts_voucher(court)
        assert not accepts_voucher(group_sessions([make_occurrence()])[0])
        assert not accepts_voucher(EventTarget(event_id=1))

    def test_equipment_for_court_and_class_only(self, court):
        assert accepts_equipment(court)
        assert accepts_equipment(make_occurrence())
        assert not accepts_equipment(EventTarget(event_id=1))
        assert not accepts_equipment(ReplacementSessionTarget(session_id=1, amount="10"))
