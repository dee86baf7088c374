"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, Union

import pytest

from courtside.backend.memory import InMemoryBackend
from courtside.payment.pricing import PriceCalculator
from courtside.payment.state_machine import PaymentStateMachine
from courtside.payment.validation import PaymentValidator
from courtside.schemas.payment_schema import Voucher
from courtside.schemas.session_schema import ClassSessionOccurrence, Registration

ACTING_USER = 7
BASE_TIME = datetime(2025, 3, 3, 9, 0)  # a Monday morning


@pytest.fixture
def calculator():
    return PriceCalculator(paddle_unit_price=Decimal("5"), ball_set_price=Decimal("12"))


@pytest.fixture
def state_machine():
    return PaymentStateMachine()


@pytest.fixture
def validator():
    return PaymentValidator()


def make_registration(
    user_id: Union[int, str] = ACTING_USER,
    registration_id: int = 1,
    member_name: str = "Member",
) -> Registration:
    """Helper to create a Registration."""
    return Registration(
        registration_id=registration_id,
        user_id=user_id,
        member_name=member_name,
    )


def make_occurrence(
    id: int = 1,
    recurring_group_id: Union[int, str, None] = None,
    start_time: Optional[datetime] = None,
    price: Union[Decimal, str] = "20",
    status: str = "AVAILABLE",
    current_participants: int = 0,
    max_participants: int = 8,
    registrations: tuple[Registration, ...] = (),
    coach_name: str = "Coach Lim",
    venue_name: str = "Bangsar Hub",
    venue_state: str = "Kuala Lumpur",
    title: str = "Beginner Clinic",
) -> ClassSessionOccurrence:
    """Helper to create a ClassSessionOccurrence with sensible defaults."""
    start = start_time or BASE_TIME
    return ClassSessionOccurrence(
        id=id,
        recurring_group_id=recurring_group_id,
        coach_name=coach_name,
        venue_name=venue_name,
        venue_state=venue_state,
        court_name="Court 1",
        title=title,
        start_time=start,
        end_time=start + timedelta(hours=1),
        price=price,
        status=status,
        current_participants=current_participants,
        max_participants=max_participants,
        registrations=registrations,
    )


def make_weekly_course(
    group_id: int = 9,
    first_id: int = 100,
    weeks: int = 3,
    price: str = "20",
    **kwargs,
) -> list[ClassSessionOccurrence]:
    """Create ``weeks`` occurrences of one recurring class, a week apart."""
    return [
        make_occurrence(
            id=first_id + i,
            recurring_group_id=group_id,
            start_time=BASE_TIME + timedelta(days=7 * i),
            price=price,
            **kwargs,
        )
        for i in range(weeks)
    ]


def make_voucher(
    id: int = 55,
    discount_type: str = "PERCENTAGE",
    discount_value: str = "10",
    expiry_date: Optional[date] = None,
) -> Voucher:
    """Helper to create a Voucher."""
    return Voucher(
        id=id,
        discount_type=discount_type,
        discount_value=Decimal(discount_value),
        expiry_date=expiry_date,
        voucher_code=f"CODE{id}",
    )


@pytest.fixture
def memory_backend():
    backend = InMemoryBackend(
        user_id=ACTING_USER,
        sessions=make_weekly_course() + [make_occurrence(id=200, price="40")],
        wallet_balance=Decimal("100"),
        vouchers=[make_voucher()],
        court_slot_prices={1: Decimal("40"), 2: Decimal("40")},
        event_fees={5: Decimal("30")},
    )
    yield backend
    backend.reset()
