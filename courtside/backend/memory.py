"""
In-memory Booking Backend.

Mirrors the real Backend's contract closely enough to drive the payment
flow offline: capacity check-and-increment happens atomically inside
submission, multi-session registration is all-or-nothing, and wallet
debits fail with the same "Insufficient wallet balance" message.
Used by the console demo and by test fixtures (call ``reset()``).
"""

import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from courtside.backend.errors import (
    BackendConflictError,
    BackendNotFoundError,
    BackendRequestError,
)
from courtside.payment.pricing import PriceCalculator, apply_voucher
from courtside.schemas.booking_schema import (
    BookingIntent,
    CourtBookingIntent,
    EventRegistrationIntent,
    MultiSessionRegistrationIntent,
    ReplacementPaymentIntent,
    SessionRegistrationIntent,
    describe_intent,
)
from courtside.schemas.payment_schema import BookingResult, EquipmentSelection, Voucher
from courtside.schemas.session_schema import (
    ClassSessionOccurrence,
    Registration,
    SessionStatus,
)
from courtside.utils import UserId, normalize_user_id, to_money

logger = logging.getLogger(__name__)

INSUFFICIENT_BALANCE = "Insufficient wallet balance"


class InMemoryBackend:
    """Booking Backend held in process memory for one acting user."""

    def __init__(
        self,
        user_id: Union[int, str],
        member_name: str = "Member",
        sessions: Iterable[ClassSessionOccurrence] = (),
        wallet_balance: Optional[Decimal] = Decimal("0"),
        vouchers: Iterable[Voucher] = (),
        court_slot_prices: Optional[dict[int, Decimal]] = None,
        event_fees: Optional[dict[int, Decimal]] = None,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.user_id: UserId = normalize_user_id(user_id)
        self.member_name = member_name
        self._initial = (
            tuple(sessions),
            wallet_balance,
            tuple(vouchers),
            dict(court_slot_prices or {}),
            dict(event_fees or {}),
        )
        self.gate = gate
        self._calculator = PriceCalculator()
        self.reset()

    def reset(self) -> None:
        """Restore the seeded state. Used by test fixtures for isolation."""
        sessions, balance, vouchers, slots, events = self._initial
        self.sessions: dict[int, ClassSessionOccurrence] = {s.id: s for s in sessions}
        self.wallet_balance: Optional[Decimal] = (
            None if balance is None else to_money(balance)
        )
        self.vouchers: dict[Union[int, str], Voucher] = {v.id: v for v in vouchers}
        self.court_slot_prices = {k: to_money(v) for k, v in slots.items()}
        self.booked_slots: set[int] = set()
        self.event_fees = {k: to_money(v) for k, v in events.items()}
        self.event_registrations: set[int] = set()
        self.submissions: list[BookingIntent] = []
        self.balance_reads = 0
        self._next_registration_id = 1

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def fetch_available_sessions(
        self, start: datetime, end: datetime
    ) -> list[ClassSessionOccurrence]:
        return [
            s for s in self.sessions.values()
            if start <= s.start_time <= end and s.status != SessionStatus.CANCELLED
        ]

    async def fetch_wallet_balance(self) -> Decimal:
        self.balance_reads += 1
        if self.wallet_balance is None:
            raise BackendNotFoundError("Wallet not found", 404)
        return self.wallet_balance

    async def initialize_wallet(self) -> None:
        if self.wallet_balance is None:
            self.wallet_balance = to_money(0)
            logger.info("Wallet initialized for user %s", self.user_id)

    async def fetch_active_vouchers(self) -> list[Voucher]:
        return list(self.vouchers.values())

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    async def submit(self, intent: BookingIntent) -> BookingResult:
        self.submissions.append(intent)
        if self.gate is not None:
            await self.gate.wait()

        if isinstance(intent, SessionRegistrationIntent):
            return self._register(
                [intent.session_id], intent.use_wallet,
                EquipmentSelection(num_paddles=intent.num_paddles, buy_ball_set=intent.buy_ball_set),
                multi=False,
            )
        if isinstance(intent, MultiSessionRegistrationIntent):
            return self._register(
                list(intent.session_ids), intent.payment_method == "wallet",
                EquipmentSelection(num_paddles=intent.num_paddles, buy_ball_set=intent.buy_ball_set),
                multi=True,
            )
        if isinstance(intent, CourtBookingIntent):
            return self._book_court(intent)
        if isinstance(intent, EventRegistrationIntent):
            return self._register_event(intent)
        if isinstance(intent, ReplacementPaymentIntent):
            return self._pay_replacement(intent)
        raise BackendRequestError(f"Unsupported request: {type(intent).__name__}", 400)

    def _debit(self, use_wallet: bool, amount: Decimal) -> None:
        if not use_wallet:
            return
        if self.wallet_balance is None or self.wallet_balance < amount:
            raise BackendRequestError(INSUFFICIENT_BALANCE, 400)
        self.wallet_balance = to_money(self.wallet_balance - amount)

    def _result(self, total: Decimal, **extra) -> BookingResult:
        points = int(total)
        return BookingResult(
            total_amount=total,
            points_earned=points,
            current_tier_point_balance=points,
            current_reward_point_balance=points,
            **extra,
        )

    def _register(
        self,
        session_ids: list[int],
        use_wallet: bool,
        equipment: EquipmentSelection,
        multi: bool,
    ) -> BookingResult:
        missing = [sid for sid in session_ids if sid not in self.sessions]
        if missing:
            message = "Some sessions not found" if multi else "Session not found"
            raise BackendNotFoundError(message, 404)

        sessions = [self.sessions[sid] for sid in session_ids]
        for session in sessions:
            if session.current_participants >= session.max_participants:
                suffix = f": {session.id}" if multi else ""
                raise BackendConflictError(f"Session is full{suffix}", 409)
            if session.is_registered(self.user_id):
                if multi:
                    raise BackendConflictError(f"Already registered for session: {session.id}", 409)
                raise BackendConflictError("User already registered for this session", 409)

        total = sum((s.price for s in sessions), Decimal("0"))
        total += self._calculator.equipment_surcharge(equipment)
        total = to_money(total)
        self._debit(use_wallet, total)

        for session in sessions:
            registration = Registration(
                registration_id=self._next_registration_id,
                user_id=self.user_id,
                member_name=self.member_name,
            )
            self._next_registration_id += 1
            participants = session.current_participants + 1
            status = session.status
            if participants >= session.max_participants:
                status = SessionStatus.FULL
            self.sessions[session.id] = session.model_copy(update={
                "current_participants": participants,
                "status": status,
                "registrations": session.registrations + (registration,),
            })
        logger.info("Registered user %s for sessions %s (%s)", self.user_id, session_ids, total)
        return self._result(total, sessionIds=session_ids)

    def _book_court(self, intent: CourtBookingIntent) -> BookingResult:
        unknown = [sid for sid in intent.slot_ids if sid not in self.court_slot_prices]
        if unknown:
            raise BackendNotFoundError("Slot not found", 404)
        if any(sid in self.booked_slots for sid in intent.slot_ids):
            raise BackendConflictError("Court is already booked", 409)

        total = sum((self.court_slot_prices[sid] for sid in intent.slot_ids), Decimal("0"))
        total += self._calculator.equipment_surcharge(
            EquipmentSelection(num_paddles=intent.num_paddles, buy_ball_set=intent.buy_ball_set)
        )
        voucher = None
        if intent.use_voucher:
            voucher = self.vouchers.get(intent.voucher_redemption_id)
            if voucher is None:
                raise BackendRequestError("Voucher not found or already used", 400)
            total = apply_voucher(total, voucher)
        total = to_money(total)
        self._debit(intent.use_wallet, total)

        if voucher is not None:
            del self.vouchers[voucher.id]
        self.booked_slots.update(intent.slot_ids)
        logger.info("Court slots %s booked (%s)", list(intent.slot_ids), total)
        return self._result(total, slotIds=list(intent.slot_ids), purpose=intent.purpose)

    def _register_event(self, intent: EventRegistrationIntent) -> BookingResult:
        if intent.event_id not in self.event_fees:
            raise BackendNotFoundError("Event not found", 404)
        if intent.event_id in self.event_registrations:
            raise BackendConflictError("Already registered for this event", 409)
        fee = self.event_fees[intent.event_id]
        self._debit(intent.use_wallet, fee)
        self.event_registrations.add(intent.event_id)
        return self._result(fee, eventId=intent.event_id, feeAmount=str(fee))

    def _pay_replacement(self, intent: ReplacementPaymentIntent) -> BookingResult:
        amount = to_money(intent.amount)
        self._debit(intent.use_wallet, amount)
        logger.info("Replacement session %s paid (%s)", intent.session_id, amount)
        return self._result(amount, sessionId=intent.session_id)

    def summary(self) -> str:
        return f"{len(self.submissions)} submissions: " + ", ".join(
            describe_intent(i) for i in self.submissions
        )
