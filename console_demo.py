"""
Offline console demo — browses class sessions and pays for bookings
without a Backend or API token.

Runs the real session board, price calculator, validator and payment
state machine against the in-memory Backend. No network calls.
Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario insufficient
    python console_demo.py --scenario court-voucher
"""

import argparse
import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from courtside.backend.memory import InMemoryBackend
from courtside.config import settings
from courtside.payment.orchestrator import PaymentOrchestrator, PaymentOutcome
from courtside.payment.pricing import BookingTarget
from courtside.schemas.booking_schema import CourtSlotTarget
from courtside.schemas.payment_schema import EquipmentSelection, FundingMethod, Voucher
from courtside.schemas.session_schema import ClassSessionOccurrence, Registration
from courtside.sessions.board import SessionBoard
from courtside.sessions.filters import SessionFilter, TimeOfDay
from courtside.utils import format_money

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_USER_ID = 7
DEMO_MEMBER = "Aina"


def _seed_sessions(start: datetime) -> list[ClassSessionOccurrence]:
    """Six weekly beginner clinics, one evening drill, one full social."""
    sessions: list[ClassSessionOccurrence] = []
    for week in range(6):
        day = start + timedelta(days=7 * week)
        sessions.append(ClassSessionOccurrence(
            id=100 + week,
            recurring_group_id=9,
            coach_name="Coach Lim",
            venue_name="Bangsar Hub",
            venue_state="Kuala Lumpur",
            court_name="Court 2",
            title="Beginner Clinic",
            start_time=day.replace(hour=9),
            end_time=day.replace(hour=10),
            price=Decimal("25"),
            current_participants=3,
            max_participants=8,
        ))
    sessions.append(ClassSessionOccurrence(
        id=200,
        coach_name="Coach Raj",
        venue_name="Subang Arena",
        venue_state="Selangor",
        court_name="Court 1",
        title="Evening Drills",
        start_time=start.replace(hour=19),
        end_time=start.replace(hour=20, minute=30),
        price=Decimal("40"),
        current_participants=1,
        max_participants=6,
    ))
    sessions.append(ClassSessionOccurrence(
        id=300,
        coach_name="Coach Lim",
        venue_name="Bangsar Hub",
        venue_state="Kuala Lumpur",
        court_name="Court 3",
        title="Social Play",
        start_time=start.replace(hour=14),
        end_time=start.replace(hour=16),
        price=Decimal("15"),
        status="FULL",
        current_participants=4,
        max_participants=4,
        registrations=(
            Registration(registration_id=1, user_id="12", member_name="Wei"),
        ),
    ))
    return sessions


class ConsoleSession:
    """Walks a member through browse and payment in the terminal."""

    def __init__(self, wallet_balance: Optional[Decimal] = Decimal("200")) -> None:
        start = (datetime.now(timezone.utc) + timedelta(days=1)).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        self.backend = InMemoryBackend(
            user_id=DEMO_USER_ID,
            member_name=DEMO_MEMBER,
            sessions=_seed_sessions(start),
            wallet_balance=wallet_balance,
            vouchers=[
                Voucher(
                    id=55,
                    discount_type="PERCENTAGE",
                    discount_value=Decimal("10"),
                    expiry_date=date.today() + timedelta(days=30),
                    voucher_code="RALLY10",
                    voucher_title="10% off court bookings",
                ),
            ],
            court_slot_prices={1: Decimal("40"), 2: Decimal("40")},
        )
        self.board = SessionBoard(self.backend, DEMO_USER_ID)
        self._now = start - timedelta(hours=1)

    def member_say(self, text: str) -> None:
        print(f"\n{BLUE}[{DEMO_MEMBER}] {RESET}{text}")

    def app_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[{settings.app_name}]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    # ------------------------------------------------------------------ #
    # Browse
    # ------------------------------------------------------------------ #

    async def show_board(self, session_filter: Optional[SessionFilter] = None) -> None:
        if session_filter is not None:
            self.board.apply_filter(session_filter)
        await self.board.refresh(now=self._now)
        for entry in self.board.entries:
            group = entry.group
            colour = GREEN if entry.can_book else YELLOW
            print(
                f"  {BOLD}{group.title}{RESET} with {group.coach_name} at {group.venue_name}"
                f" ({group.date_range_label}, {len(group)} session(s),"
                f" {format_money(group.total_price)}) {colour}[{entry.label}]{RESET}"
            )
        counts = {status.value: n for status, n in self.board.status_summary().items()}
        self.system_log(f"Status counts: {counts}")

    # ------------------------------------------------------------------ #
    # Payment
    # ------------------------------------------------------------------ #

    async def open_payment(
        self, target: BookingTarget, equipment: Optional[EquipmentSelection] = None
    ) -> PaymentOrchestrator:
        payment = PaymentOrchestrator(self.backend, target, equipment=equipment)
        await payment.load()
        balance = payment.wallet_balance
        self.app_say(
            f"Amount due {format_money(payment.amount_due)}. Wallet balance "
            f"{format_money(balance) if balance is not None else 'unavailable'}."
        )
        self.system_log(f"Default method: {payment.funding_method.value}")
        return payment

    async def pay(self, payment: PaymentOrchestrator) -> Optional[PaymentOutcome]:
        outcome = await payment.submit()
        self.system_log(f"State: {payment.state.value}")
        if outcome is None:
            return None
        if outcome.succeeded:
            result = outcome.result
            self.app_say(
                f"Booking confirmed! Charged {format_money(result.total_amount)}, "
                f"earned {result.points_earned} points."
            )
        else:
            colour = YELLOW if outcome.recoverable else RED
            print(f"{colour}{BOLD}[{settings.app_name}]{RESET} {colour}{outcome.message}{RESET}")
            if outcome.hint:
                self.system_log(f"Hint: {outcome.hint}")
        return outcome

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    async def scenario_group(self) -> None:
        self.member_say("Show me morning classes.")
        await self.show_board(SessionFilter(time_of_day=TimeOfDay.MORNING))

        entry = self.board.get_entry("9")
        self.member_say(f"{entry.label}, with 2 paddles please.")
        payment = await self.open_payment(
            entry.group, EquipmentSelection(num_paddles=2)
        )
        await self.pay(payment)
        self.system_log(f"Wallet after booking: {format_money(payment.wallet_balance)}")

        self.member_say("Show me everything again.")
        await self.show_board(SessionFilter())

    async def scenario_insufficient(self) -> None:
        self.member_say("I'd like the evening drill.")
        await self.show_board()
        entry = self.board.get_entry("single_200")

        payment = await self.open_payment(entry.group, EquipmentSelection(buy_ball_set=True))
        self.member_say("Pay from my wallet.")
        await self.pay(payment)

        self.member_say("Fine, I'll use my card.")
        payment.select_funding_method(FundingMethod.CARD)
        await self.pay(payment)

    async def scenario_court_voucher(self) -> None:
        court = CourtSlotTarget(
            slot_ids=(1, 2),
            price=Decimal("80"),
            court_name="Court 1",
            duration_hours=2,
        )
        self.member_say("Book Court 1 for two hours, one paddle, use my voucher.")
        payment = await self.open_payment(court, EquipmentSelection(num_paddles=1))
        payment.select_voucher(payment.vouchers[0])
        self.app_say(f"With {payment.voucher.voucher_code}: {format_money(payment.amount_due)}")
        await self.pay(payment)

        self.member_say("Book the same slots again for my friends.")
        retry = await self.open_payment(court)
        retry.select_funding_method(FundingMethod.CARD)
        await self.pay(retry)

    SCENARIOS = {
        "group": (scenario_group, Decimal("200")),
        "insufficient": (scenario_insufficient, Decimal("20")),
        "court-voucher": (scenario_court_voucher, Decimal("150")),
    }


async def run_scenario(scenario: str) -> None:
    """Auto-play a pre-scripted scenario for demo purposes."""
    entry = ConsoleSession.SCENARIOS.get(scenario)
    if entry is None:
        print(f"{RED}Unknown scenario: {scenario}{RESET}")
        return
    play, balance = entry
    session = ConsoleSession(wallet_balance=balance)

    print()
    print(f"{BOLD}{'=' * 60}{RESET}")
    print(f"{BOLD}  COURTSIDE - Scenario: {scenario}{RESET}")
    print(f"{BOLD}  Member: {DEMO_MEMBER} (#{DEMO_USER_ID}){RESET}")
    print(f"{BOLD}{'=' * 60}{RESET}")

    await play(session)

    print(f"\n{BOLD}{'=' * 60}{RESET}")
    print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
    print(f"{DIM}  Backend: {session.backend.summary()}{RESET}")
    print(f"{BOLD}{'=' * 60}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default="group",
        help="Pre-scripted scenario to play",
    )
    args = parser.parse_args()
    asyncio.run(run_scenario(args.scenario))


if __name__ == "__main__":
    main()
