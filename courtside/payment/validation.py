"""
Local pre-submission checks for a payment attempt.

Independent check layers, each covering one concern:
1. InputChecks   — funding method chosen, voucher selection coherent
2. TargetChecks  — voucher and equipment only where the booking type takes them
3. WalletCheck   — wallet balance covers the amount due

They are composed into a PaymentValidator. Nothing here calls the
Backend; a failing check blocks submission with a machine-checkable
reason code.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from courtside.payment.pricing import BookingTarget, accepts_equipment, accepts_voucher
from courtside.schemas.payment_schema import EquipmentSelection, FundingMethod, Voucher
from courtside.utils import format_money

logger = logging.getLogger(__name__)


class FailureReason(str, Enum):
    """Machine-checkable reasons for a recoverable or fatal outcome."""
    NO_FUNDING_METHOD = "NO_FUNDING_METHOD"
    VOUCHER_NOT_SELECTED = "VOUCHER_NOT_SELECTED"
    VOUCHER_NOT_APPLICABLE = "VOUCHER_NOT_APPLICABLE"
    VOUCHER_EXPIRED = "VOUCHER_EXPIRED"
    EQUIPMENT_NOT_APPLICABLE = "EQUIPMENT_NOT_APPLICABLE"
    BALANCE_UNAVAILABLE = "BALANCE_UNAVAILABLE"
    WALLET_EMPTY = "WALLET_EMPTY"
    WALLET_INSUFFICIENT = "WALLET_INSUFFICIENT"
    SESSION_UNAVAILABLE = "SESSION_UNAVAILABLE"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    AUTH_EXPIRED = "AUTH_EXPIRED"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    BACKEND_ERROR = "BACKEND_ERROR"


@dataclass
class CheckResult:
    """Outcome of a single check."""
    passed: bool
    reason: Optional[FailureReason] = None
    message: Optional[str] = None


PASSED = CheckResult(passed=True)


@dataclass(frozen=True)
class PaymentDraft:
    """Everything the user has chosen so far, as seen by the checks."""
    target: BookingTarget
    amount_due: Decimal
    funding_method: Optional[FundingMethod]
    wallet_balance: Optional[Decimal]
    equipment: EquipmentSelection
    use_voucher: bool = False
    voucher: Optional[Voucher] = None


class InputChecks:
    """Form-level checks that never need Backend data."""

    def check_funding_method(self, draft: PaymentDraft) -> CheckResult:
        if draft.funding_method is None:
            return CheckResult(
                passed=False,
                reason=FailureReason.NO_FUNDING_METHOD,
                message="Please choose a payment method.",
            )
        return PASSED

    def check_voucher_selected(self, draft: PaymentDraft) -> CheckResult:
        if draft.use_voucher and draft.voucher is None:
            return CheckResult(
                passed=False,
                reason=FailureReason.VOUCHER_NOT_SELECTED,
                message="Please select a voucher or untick 'use voucher'.",
            )
        return PASSED

    def check_voucher_expiry(self, draft: PaymentDraft, today: date) -> CheckResult:
        # An unticked voucher is kept as a selection but never applied
        if not draft.use_voucher or draft.voucher is None:
            return PASSED
        if draft.voucher.is_expired(today):
            return CheckResult(
                passed=False,
                reason=FailureReason.VOUCHER_EXPIRED,
                message=f"Voucher expired on {draft.voucher.expiry_date.isoformat()}.",
            )
        return PASSED


class TargetChecks:
    """Booking-type restrictions on vouchers and equipment."""

    def check_voucher_allowed(self, draft: PaymentDraft) -> CheckResult:
        if draft.use_voucher and not accepts_voucher(draft.target):
            return CheckResult(
                passed=False,
                reason=FailureReason.VOUCHER_NOT_APPLICABLE,
                message="Vouchers can only be used for court bookings.",
            )
        return PASSED

    def check_equipment_allowed(self, draft: PaymentDraft) -> CheckResult:
        if not draft.equipment.is_empty and not accepts_equipment(draft.target):
            return CheckResult(
                passed=False,
                reason=FailureReason.EQUIPMENT_NOT_APPLICABLE,
                message="Equipment add-ons are not available for this booking.",
            )
        return PASSED


class WalletCheck:
    """Wallet sufficiency against the amount due."""

    def check_balance(self, draft: PaymentDraft) -> CheckResult:
        if draft.funding_method != FundingMethod.WALLET or draft.amount_due <= 0:
            return PASSED
        balance = draft.wallet_balance
        if balance is None:
            return CheckResult(
                passed=False,
                reason=FailureReason.BALANCE_UNAVAILABLE,
                message="Wallet balance could not be loaded. Please pay by card.",
            )
        if balance <= 0:
            return CheckResult(
                passed=False,
                reason=FailureReason.WALLET_EMPTY,
                message="Your wallet is empty. Please top up or pay by card.",
            )
        if balance < draft.amount_due:
            shortfall = draft.amount_due - balance
            return CheckResult(
                passed=False,
                reason=FailureReason.WALLET_INSUFFICIENT,
                message=(
                    f"Insufficient wallet balance. Please add {format_money(shortfall)} "
                    "or choose another payment method."
                ),
            )
        return PASSED


class PaymentValidator:
    """Runs input and target checks first, then the wallet check."""

    def __init__(self) -> None:
        self.inputs = InputChecks()
        self.target = TargetChecks()
        self.wallet = WalletCheck()

    def check(self, draft: PaymentDraft, today: Optional[date] = None) -> list[CheckResult]:
        """Return every failing check, input problems before wallet problems."""
        today = today or date.today()
        results = [
            self.inputs.check_funding_method(draft),
            self.target.check_voucher_allowed(draft),
            self.inputs.check_voucher_selected(draft),
            self.inputs.check_voucher_expiry(draft, today),
            self.target.check_equipment_allowed(draft),
            self.wallet.check_balance(draft),
        ]
        failures = [r for r in results if not r.passed]
        if failures:
            logger.debug("Payment checks failed: %s", [f.reason.value for f in failures])
        return failures
