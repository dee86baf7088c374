"""Tests for local pre-submission payment checks."""

from datetime import date
from decimal import Decimal

from courtside.payment.validation import FailureReason, PaymentDraft
from courtside.schemas.booking_schema import CourtSlotTarget, EventTarget
from courtside.schemas.payment_schema import EquipmentSelection, FundingMethod
from courtside.sessions.aggregator import group_sessions
from tests.conftest import make_occurrence, make_voucher

TODAY = date(2025, 3, 1)


def _draft(**overrides) -> PaymentDraft:
    values = dict(
        target=group_sessions([make_occurrence()])[0],
        amount_due=Decimal("82.00"),
        funding_method=FundingMethod.WALLET,
        wallet_balance=Decimal("100.00"),
        equipment=EquipmentSelection(),
    )
    values.update(overrides)
    return PaymentDraft(**values)


def _reasons(validator, draft):
    return [r.reason for r in validator.check(draft, today=TODAY)]


class TestInputChecks:
    def test_clean_draft_passes(self, validator):
        assert validator.check(_draft(), today=TODAY) == []

    def test_missing_funding_method(self, validator):
        assert _reasons(validator, _draft(funding_method=None)) == [
            FailureReason.NO_FUNDING_METHOD
        ]

    def test_use_voucher_without_selection(self, validator):
        draft = _draft(target=CourtSlotTarget(slot_ids=(1,), price="80"), use_voucher=True)
        assert _reasons(validator, draft) == [FailureReason.VOUCHER_NOT_SELECTED]

    def test_expired_voucher(self, validator):
        draft = _draft(
            target=CourtSlotTarget(slot_ids=(1,), price="80"),
            use_voucher=True,
            voucher=make_voucher(expiry_date=date(2025, 2, 28)),
        )
        assert _reasons(validator, draft) == [FailureReason.VOUCHER_EXPIRED]

    def test_unticked_expired_voucher_ignored(self, validator):
        draft = _draft(
            target=CourtSlotTarget(slot_ids=(1,), price="80"),
            use_voucher=False,
            voucher=make_voucher(expiry_date=date(2025, 2, 28)),
        )
        assert validator.check(draft, today=TODAY) == []

    def test_voucher_expiring_today_still_valid(self, validator):
        draft = _draft(
            target=CourtSlotTarget(slot_ids=(1,), price="80"),
            use_voucher=True,
            voucher=make_voucher(expiry_date=TODAY),
        )
        assert validator.check(draft, today=TODAY) == []


class TestTargetChecks:
    def test_voucher_on_class_session(self, validator):
        draft = _draft(use_voucher=True, voucher=make_voucher())
        assert FailureReason.VOUCHER_NOT_APPLICABLE in _reasons(validator, draft)

    def test_unticked_voucher_on_class_session_ignored(self, validator):
        draft = _draft(use_voucher=False, voucher=make_voucher())
        assert validator.check(draft, today=TODAY) == []

    def test_equipment_on_event(self, validator):
        draft = _draft(target=EventTarget(event_id=1, fee="30"),
                       equipment=EquipmentSelection(num_paddles=1))
        assert _reasons(validator, draft) == [FailureReason.EQUIPMENT_NOT_APPLICABLE]


class TestWalletCheck:
    def test_insufficient_balance(self, validator):
        failures = validator.check(_draft(wallet_balance=Decimal("10")), today=TODAY)
        assert [f.reason for f in failures] == [FailureReason.WALLET_INSUFFICIENT]
        assert "RM72.00" in failures[0].message

    def test_empty_wallet(self, validator):
        assert _reasons(validator, _draft(wallet_balance=Decimal("0"))) == [
            FailureReason.WALLET_EMPTY
        ]

    def test_unknown_balance(self, validator):
        assert _reasons(validator, _draft(wallet_balance=None)) == [
            FailureReason.BALANCE_UNAVAILABLE
        ]

    def test_exact_balance_passes(self, validator):
        assert validator.check(_draft(wallet_balance=Decimal("82.00")), today=TODAY) == []

    def test_card_skips_wallet_check(self, validator):
        draft = _draft(funding_method=FundingMethod.CARD, wallet_balance=Decimal("0"))
        assert validator.check(draft, today=TODAY) == []

    def test_zero_total_passes_with_empty_wallet(self, validator):
        draft = _draft(amount_due=Decimal("0.00"), wallet_balance=Decimal("0"))
        assert validator.check(draft, today=TODAY) == []

    def test_input_problems_reported_before_wallet(self, validator):
        draft = _draft(
            target=CourtSlotTarget(slot_ids=(1,), price="80"),
            use_voucher=True,
            wallet_balance=Decimal("1"),
        )
        assert _reasons(validator, draft) == [
            FailureReason.VOUCHER_NOT_SELECTED,
            FailureReason.WALLET_INSUFFICIENT,
        ]
