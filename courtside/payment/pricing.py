"""
Amount-due calculation for every booking target.

    total = base + paddles * paddle price + (ball set price if bought)
    total = voucher applied to total, clamped at zero

All arithmetic is Decimal. The calculator holds no per-call state, so it
can be re-run on every input change and always gives the same answer for
the same inputs.
"""

import logging
from decimal import Decimal
from typing import Optional, Union

from courtside.config import settings
from courtside.schemas.booking_schema import (
    BookingKind,
    CourtSlotTarget,
    EventTarget,
    ReplacementSessionTarget,
)
from courtside.schemas.payment_schema import DiscountType, EquipmentSelection, Voucher
from courtside.schemas.session_schema import ClassSessionOccurrence
from courtside.sessions.aggregator import SessionGroup
from courtside.utils import to_money

logger = logging.getLogger(__name__)

BookingTarget = Union[
    SessionGroup,
    ClassSessionOccurrence,
    CourtSlotTarget,
    EventTarget,
    ReplacementSessionTarget,
]

# Only court bookings take a voucher
VOUCHER_KINDS = frozenset({BookingKind.COURT})
EQUIPMENT_KINDS = frozenset({BookingKind.COURT, BookingKind.CLASS_SESSION})


class VoucherNotApplicableError(ValueError):
    """Raised when a voucher is offered for a booking type that cannot take one."""


def booking_kind(target: BookingTarget) -> BookingKind:
    if isinstance(target, (SessionGroup, ClassSessionOccurrence)):
        return BookingKind.CLASS_SESSION
    if isinstance(target, CourtSlotTarget):
        return BookingKind.COURT
    if isinstance(target, EventTarget):
        return BookingKind.EVENT
    if isinstance(target, ReplacementSessionTarget):
        return BookingKind.REPLACEMENT_SESSION
    raise TypeError(f"Unsupported booking target: {type(target).__name__}")


def accepts_voucher(target: BookingTarget) -> bool:
    """Whether the voucher input should be enabled for this target."""
    return booking_kind(target) in VOUCHER_KINDS


def accepts_equipment(target: BookingTarget) -> bool:
    return booking_kind(target) in EQUIPMENT_KINDS


def base_amount(target: BookingTarget) -> Decimal:
    """Sum of the fees being paid for, before add-ons and discounts."""
    if isinstance(target, SessionGroup):
        return to_money(target.total_price)
    if isinstance(target, ClassSessionOccurrence):
        return to_money(target.price)
    if isinstance(target, CourtSlotTarget):
        return to_money(target.price)
    if isinstance(target, EventTarget):
        return to_money(target.fee)
    if isinstance(target, ReplacementSessionTarget):
        return to_money(target.amount)
    raise TypeError(f"Unsupported booking target: {type(target).__name__}")


def apply_voucher(subtotal: Decimal, voucher: Voucher) -> Decimal:
    if voucher.discount_type == DiscountType.PERCENTAGE:
        discounted = subtotal * (1 - voucher.discount_value / 100)
    else:
        discounted = subtotal - voucher.discount_value
    return max(Decimal("0"), to_money(discounted))


class PriceCalculator:
    """Computes the payable total; unit prices default to configuration."""

    def __init__(
        self,
        paddle_unit_price: Optional[Decimal] = None,
        ball_set_price: Optional[Decimal] = None,
    ) -> None:
        self.paddle_unit_price = to_money(
            settings.pricing.paddle_unit_price if paddle_unit_price is None else paddle_unit_price
        )
        self.ball_set_price = to_money(
            settings.pricing.ball_set_price if ball_set_price is None else ball_set_price
        )

    def equipment_surcharge(self, equipment: Optional[EquipmentSelection]) -> Decimal:
        if equipment is None:
            return to_money(0)
        surcharge = equipment.num_paddles * self.paddle_unit_price
        if equipment.buy_ball_set:
            surcharge += self.ball_set_price
        return to_money(surcharge)

    def subtotal(
        self, target: BookingTarget, equipment: Optional[EquipmentSelection] = None
    ) -> Decimal:
        surcharge = self.equipment_surcharge(equipment) if accepts_equipment(target) else to_money(0)
        return base_amount(target) + surcharge

    def compute_total(
        self,
        target: BookingTarget,
        equipment: Optional[EquipmentSelection] = None,
        voucher: Optional[Voucher] = None,
    ) -> Decimal:
        """
        Compute the amount due for a booking attempt.

        Raises:
            VoucherNotApplicableError: If a voucher is given for a target
                other than a court booking.
        """
        subtotal = self.subtotal(target, equipment)
        if voucher is None:
            return subtotal
        if not accepts_voucher(target):
            raise VoucherNotApplicableError(
                f"Vouchers cannot be applied to {booking_kind(target).value} bookings."
            )
        total = apply_voucher(subtotal, voucher)
        logger.debug(
            "Voucher %s (%s %s) applied: %s -> %s",
            voucher.id, voucher.discount_type.value, voucher.discount_value, subtotal, total,
        )
        return total
