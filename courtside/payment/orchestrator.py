"""
Payment orchestrator: picks a funding method, validates, submits, recovers.

Drives one payment page through the PaymentStateMachine:
Load -> Choose -> Validate -> Submit -> Outcome. Wallet balance and the
voucher list are read-only snapshots taken from the Backend; after every
Backend-terminal outcome the balance is re-read rather than adjusted
locally. Nothing is marked as booked until the Backend confirms it. A
submission cancelled before the Backend answers discards the pending
result; once it has answered, the outcome is kept.
"""

import asyncio
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from courtside.backend.errors import (
    BackendAuthError,
    BackendConnectionError,
    BackendError,
    BackendNotFoundError,
    BackendRequestError,
)
from courtside.backend.protocol import BookingBackend
from courtside.logging_context import get_attempt_logger, set_attempt_id
from courtside.payment.intents import build_intent
from courtside.payment.pricing import (
    BookingTarget,
    PriceCalculator,
    VoucherNotApplicableError,
    accepts_voucher,
    booking_kind,
)
from courtside.payment.state_machine import PaymentState, PaymentStateMachine, PaymentTrigger
from courtside.payment.validation import (
    CheckResult,
    FailureReason,
    PaymentDraft,
    PaymentValidator,
)
from courtside.schemas.booking_schema import BookingIntent, describe_intent
from courtside.schemas.payment_schema import (
    BookingResult,
    EquipmentSelection,
    FundingMethod,
    Voucher,
)
from courtside.utils import format_money, to_money

logger = get_attempt_logger(__name__)

INSUFFICIENT_BALANCE_PATTERN = re.compile(r"insufficient wallet balance", re.IGNORECASE)
ALREADY_REGISTERED_PATTERN = re.compile(r"already registered", re.IGNORECASE)
UNAVAILABLE_PATTERN = re.compile(
    r"\bfull\b|no longer available|already booked"
    r"|\b(?:session|slot|court|class|event)\b[^.]*\bnot available",
    re.IGNORECASE,
)

RECOVERY_HINTS: dict[FailureReason, str] = {
    FailureReason.WALLET_EMPTY: "Top up your wallet or pay by card.",
    FailureReason.WALLET_INSUFFICIENT: "Top up your wallet or pay by card.",
    FailureReason.BALANCE_UNAVAILABLE: "Pay by card or try again later.",
    FailureReason.SESSION_UNAVAILABLE: "This slot was just taken. Please browse again and pick another.",
    FailureReason.ALREADY_REGISTERED: "You already hold a place. Check your bookings.",
}


@dataclass(frozen=True)
class PaymentOutcome:
    """Result of one submit call."""

    state: PaymentState
    amount_due: Decimal
    reason: Optional[FailureReason] = None
    message: Optional[str] = None
    result: Optional[BookingResult] = None
    intent: Optional[BookingIntent] = None
    failures: tuple[CheckResult, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.state == PaymentState.SUCCEEDED

    @property
    def recoverable(self) -> bool:
        return self.state == PaymentState.FAILED_RECOVERABLE

    @property
    def hint(self) -> Optional[str]:
        return RECOVERY_HINTS.get(self.reason) if self.reason else None


class PaymentOrchestrator:
    """
    Payment flow for a single booking target.

    The target (class group or occurrence, court slots, event, or a
    replacement session) is fixed at construction; equipment, voucher and
    funding method are user inputs that can change until submission.
    """

    def __init__(
        self,
        backend: BookingBackend,
        target: BookingTarget,
        equipment: Optional[EquipmentSelection] = None,
        calculator: Optional[PriceCalculator] = None,
        validator: Optional[PaymentValidator] = None,
        on_auth_error: Optional[Callable[[BackendAuthError], None]] = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        booking_kind(target)  # rejects unsupported targets early
        self._backend = backend
        self._target = target
        self._equipment = equipment or EquipmentSelection()
        self._calculator = calculator or PriceCalculator()
        self._validator = validator or PaymentValidator()
        self._on_auth_error = on_auth_error
        self._clock = clock
        self._sm = PaymentStateMachine()

        self._funding_method: Optional[FundingMethod] = None
        self._wallet_balance: Optional[Decimal] = None
        self._vouchers: tuple[Voucher, ...] = ()
        self._voucher: Optional[Voucher] = None
        self._use_voucher = False
        self._intent: Optional[BookingIntent] = None
        self._outcome: Optional[PaymentOutcome] = None

    # ------------------------------------------------------------------ #
    # Read-only view
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> PaymentState:
        return self._sm.current_state

    @property
    def state_machine(self) -> PaymentStateMachine:
        return self._sm

    @property
    def target(self) -> BookingTarget:
        return self._target

    @property
    def outcome(self) -> Optional[PaymentOutcome]:
        return self._outcome

    @property
    def funding_method(self) -> Optional[FundingMethod]:
        return self._funding_method

    @property
    def wallet_balance(self) -> Optional[Decimal]:
        return self._wallet_balance

    @property
    def vouchers(self) -> tuple[Voucher, ...]:
        return self._vouchers

    @property
    def voucher(self) -> Optional[Voucher]:
        return self._voucher

    @property
    def use_voucher(self) -> bool:
        return self._use_voucher

    @property
    def equipment(self) -> EquipmentSelection:
        return self._equipment

    @property
    def voucher_enabled(self) -> bool:
        """Whether the voucher input should be offered at all."""
        return accepts_voucher(self._target)

    @property
    def amount_due(self) -> Decimal:
        """Recomputed from the current inputs on every access."""
        voucher = self._voucher if self._use_voucher else None
        return self._calculator.compute_total(self._target, self._equipment, voucher)

    @property
    def wallet_shortfall(self) -> Decimal:
        """How much the user must top up before the wallet covers the amount due."""
        balance = self._wallet_balance or Decimal("0")
        return max(Decimal("0"), to_money(self.amount_due - balance))

    # ------------------------------------------------------------------ #
    # Page entry
    # ------------------------------------------------------------------ #

    async def load(self) -> None:
        """Take the wallet and voucher snapshots and pick the default method."""
        self._wallet_balance = await self._read_wallet_balance(initialize=True)
        if self.voucher_enabled:
            self._vouchers = tuple(await self._backend.fetch_active_vouchers())
        if self._funding_method is None:
            self._funding_method = (
                FundingMethod.WALLET if self._wallet_balance is not None else FundingMethod.CARD
            )
        logger.info(
            "Payment page loaded: balance=%s, vouchers=%d, method=%s",
            self._wallet_balance, len(self._vouchers), self._funding_method.value,
        )

    async def _read_wallet_balance(self, initialize: bool) -> Optional[Decimal]:
        try:
            return await self._backend.fetch_wallet_balance()
        except (BackendNotFoundError, BackendRequestError) as exc:
            if not initialize:
                logger.warning("Wallet balance unavailable: %s", exc.message)
                return None
            logger.warning("Wallet not found, initializing: %s", exc.message)

        try:
            await self._backend.initialize_wallet()
            return await self._backend.fetch_wallet_balance()
        except (BackendNotFoundError, BackendRequestError) as exc:
            logger.warning("Wallet balance unavailable after initialization: %s", exc.message)
            return None

    async def _refresh_wallet_balance(self) -> None:
        """Replace the balance snapshot with a fresh Backend read."""
        try:
            self._wallet_balance = await self._backend.fetch_wallet_balance()
        except BackendError as exc:
            self._wallet_balance = None
            logger.warning("Wallet balance refresh failed: %s", exc.message)

    # ------------------------------------------------------------------ #
    # User inputs
    # ------------------------------------------------------------------ #

    def select_funding_method(self, method: Optional[FundingMethod]) -> None:
        self._funding_method = method

    def set_equipment(self, equipment: EquipmentSelection) -> None:
        self._equipment = equipment

    def set_use_voucher(self, enabled: bool) -> None:
        """
        Tick or untick "use voucher".

        Raises:
            VoucherNotApplicableError: If the target cannot take a voucher.
        """
        if enabled and not self.voucher_enabled:
            raise VoucherNotApplicableError(
                f"Vouchers cannot be applied to {booking_kind(self._target).value} bookings."
            )
        self._use_voucher = enabled

    def select_voucher(self, voucher: Optional[Voucher]) -> None:
        """
        Choose the single voucher for this attempt (``None`` clears it).

        Raises:
            VoucherNotApplicableError: If the target cannot take a voucher.
        """
        if voucher is not None and not self.voucher_enabled:
            raise VoucherNotApplicableError(
                f"Vouchers cannot be applied to {booking_kind(self._target).value} bookings."
            )
        self._voucher = voucher
        if voucher is not None:
            self._use_voucher = True

    def new_attempt(self) -> None:
        """Start over after a failure; a confirmed booking cannot be restarted."""
        self._sm.transition(PaymentTrigger.NEW_ATTEMPT)
        self._intent = None
        self._outcome = None

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    def _draft(self, amount_due: Decimal) -> PaymentDraft:
        return PaymentDraft(
            target=self._target,
            amount_due=amount_due,
            funding_method=self._funding_method,
            wallet_balance=self._wallet_balance,
            equipment=self._equipment,
            use_voucher=self._use_voucher,
            voucher=self._voucher,
        )

    async def submit(self) -> Optional[PaymentOutcome]:
        """
        Validate and submit the current choices as one BookingIntent.

        Returns:
            The outcome, or None when a submission is already in flight
            (the duplicate call does nothing). Once the attempt has
            succeeded or failed fatally, the existing outcome is returned
            without contacting the Backend.
        """
        if self._sm.in_flight:
            logger.info("Submit ignored: payment already %s", self._sm.current_state.value)
            return None
        if self._sm.current_state in (PaymentState.SUCCEEDED, PaymentState.FAILED_FATAL):
            logger.warning("Submit ignored: attempt already %s", self._sm.current_state.value)
            return self._outcome

        self._sm.transition(PaymentTrigger.SUBMIT_REQUESTED)
        amount_due = self.amount_due
        failures = self._validator.check(self._draft(amount_due), today=self._clock())
        if failures:
            self._sm.transition(PaymentTrigger.VALIDATION_FAILED)
            first = failures[0]
            logger.info("Payment blocked locally: %s", first.reason.value)
            return self._finish(PaymentOutcome(
                state=self._sm.current_state,
                amount_due=amount_due,
                reason=first.reason,
                message=first.message,
                failures=tuple(failures),
            ))

        voucher = self._voucher if self._use_voucher else None
        intent = build_intent(self._target, self._funding_method, self._equipment, voucher)
        set_attempt_id(intent.attempt_id)
        self._intent = intent
        self._sm.transition(PaymentTrigger.VALIDATION_PASSED)
        logger.info(
            "Submitting %s by %s for %s",
            describe_intent(intent), self._funding_method.value, format_money(amount_due),
        )

        try:
            result = await self._backend.submit(intent)
        except asyncio.CancelledError:
            self._abandon()
            raise
        except BackendError as exc:
            trigger, outcome = self._classify_failure(exc, intent, amount_due)
        else:
            trigger = PaymentTrigger.BACKEND_SUCCEEDED
            outcome = PaymentOutcome(
                state=PaymentState.SUCCEEDED,
                amount_due=amount_due,
                result=result,
                intent=intent,
            )
            logger.info(
                "Payment succeeded: total=%s, points=%s",
                result.total_amount, result.points_earned,
            )

        # The Backend has answered; from here on the outcome stands
        self._sm.transition(trigger)
        self._finish(outcome)
        try:
            await self._refresh_wallet_balance()
        except asyncio.CancelledError:
            self._wallet_balance = None
            logger.info("Wallet balance refresh cancelled; balance unknown")
            raise
        return outcome

    def _abandon(self) -> None:
        self._sm.transition(PaymentTrigger.CANCELLED)
        self._intent = None
        logger.info("Payment attempt abandoned; pending result discarded")

    def _finish(self, outcome: PaymentOutcome) -> PaymentOutcome:
        self._outcome = outcome
        return outcome

    def _classify_failure(
        self, exc: BackendError, intent: BookingIntent, amount_due: Decimal
    ) -> tuple[PaymentTrigger, PaymentOutcome]:
        """Map a Backend error to a recoverable reason or a fatal outcome."""
        message = exc.message

        def recoverable(reason: FailureReason) -> tuple[PaymentTrigger, PaymentOutcome]:
            logger.warning("Recoverable payment failure (%s): %s", reason.value, message)
            return PaymentTrigger.BACKEND_RECOVERABLE_ERROR, PaymentOutcome(
                state=PaymentState.FAILED_RECOVERABLE,
                amount_due=amount_due,
                reason=reason,
                message=message,
                intent=intent,
            )

        def fatal(reason: FailureReason) -> tuple[PaymentTrigger, PaymentOutcome]:
            logger.error("Payment failed (%s): %s", reason.value, message)
            return PaymentTrigger.BACKEND_FATAL_ERROR, PaymentOutcome(
                state=PaymentState.FAILED_FATAL,
                amount_due=amount_due,
                reason=reason,
                message=message,
                intent=intent,
            )

        if isinstance(exc, BackendAuthError):
            if self._on_auth_error is not None:
                self._on_auth_error(exc)
            return fatal(FailureReason.AUTH_EXPIRED)
        if isinstance(exc, BackendConnectionError):
            return fatal(FailureReason.CONNECTION_ERROR)
        if INSUFFICIENT_BALANCE_PATTERN.search(message):
            # Balance was spent elsewhere after local validation passed
            self._funding_method = FundingMethod.CARD
            return recoverable(FailureReason.WALLET_INSUFFICIENT)
        if ALREADY_REGISTERED_PATTERN.search(message):
            return recoverable(FailureReason.ALREADY_REGISTERED)
        if UNAVAILABLE_PATTERN.search(message):
            return recoverable(FailureReason.SESSION_UNAVAILABLE)
        return fatal(FailureReason.BACKEND_ERROR)
