"""Builds the one BookingIntent that matches a booking target."""

import logging
from typing import Optional

from courtside.payment.pricing import BookingTarget, VoucherNotApplicableError, accepts_voucher
from courtside.schemas.booking_schema import (
    BookingIntent,
    CourtBookingIntent,
    CourtSlotTarget,
    EventRegistrationIntent,
    EventTarget,
    MultiSessionRegistrationIntent,
    ReplacementPaymentIntent,
    ReplacementSessionTarget,
    SessionRegistrationIntent,
)
from courtside.schemas.payment_schema import EquipmentSelection, FundingMethod, Voucher
from courtside.schemas.session_schema import ClassSessionOccurrence
from courtside.sessions.aggregator import SessionGroup

logger = logging.getLogger(__name__)


def build_intent(
    target: BookingTarget,
    method: FundingMethod,
    equipment: Optional[EquipmentSelection] = None,
    voucher: Optional[Voucher] = None,
) -> BookingIntent:
    """
    Create a fresh intent for one submission attempt.

    A recurring group always goes out as a single multi-session request,
    never as one request per occurrence.

    Raises:
        VoucherNotApplicableError: If a voucher is given for a target other
            than a court booking.
    """
    equipment = equipment or EquipmentSelection()
    use_wallet = method == FundingMethod.WALLET

    if voucher is not None and not accepts_voucher(target):
        raise VoucherNotApplicableError(
            f"Vouchers cannot be applied to {type(target).__name__} bookings."
        )

    if isinstance(target, SessionGroup):
        if target.is_recurring:
            return MultiSessionRegistrationIntent(
                session_ids=tuple(target.occurrence_ids),
                payment_method=method.value,
                num_paddles=equipment.num_paddles,
                buy_ball_set=equipment.buy_ball_set,
            )
        target = target.first

    if isinstance(target, ClassSessionOccurrence):
        return SessionRegistrationIntent(
            session_id=target.id,
            use_wallet=use_wallet,
            num_paddles=equipment.num_paddles,
            buy_ball_set=equipment.buy_ball_set,
        )

    if isinstance(target, CourtSlotTarget):
        return CourtBookingIntent(
            slot_ids=target.slot_ids,
            purpose=target.purpose,
            number_of_players=target.number_of_players,
            num_paddles=equipment.num_paddles,
            buy_ball_set=equipment.buy_ball_set,
            duration_hours=target.duration_hours,
            use_wallet=use_wallet,
            use_voucher=voucher is not None,
            voucher_redemption_id=voucher.id if voucher is not None else None,
        )

    if isinstance(target, EventTarget):
        return EventRegistrationIntent(event_id=target.event_id, use_wallet=use_wallet)

    if isinstance(target, ReplacementSessionTarget):
        return ReplacementPaymentIntent(
            session_id=target.session_id,
            amount=target.amount,
            use_wallet=use_wallet,
        )

    raise TypeError(f"Unsupported booking target: {type(target).__name__}")
