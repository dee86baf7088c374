"""
Booking eligibility for a session group, derived on every render.

The result is advisory: capacity data may be stale by the time the user
pays, and the Backend's registration endpoint makes the final decision.
"""

import logging
from enum import Enum
from typing import Union

from courtside.sessions.aggregator import SessionGroup
from courtside.utils import normalize_user_id

logger = logging.getLogger(__name__)


class EligibilityState(str, Enum):
    BOOKABLE = "bookable"
    ALREADY_BOOKED = "already_booked"
    FULL = "full"


def evaluate(group: SessionGroup, acting_user_id: Union[int, str]) -> EligibilityState:
    """Derive whether the acting user may book the group.

    A registration held by the user on any member wins over capacity:
    a user who already holds a seat is never shown as blocked by it.
    The group is FULL only when every member is at capacity.
    """
    user_id = normalize_user_id(acting_user_id)

    if any(occurrence.is_registered(user_id) for occurrence in group.occurrences):
        return EligibilityState.ALREADY_BOOKED

    if all(occurrence.is_at_capacity for occurrence in group.occurrences):
        return EligibilityState.FULL

    return EligibilityState.BOOKABLE


def booking_label(group: SessionGroup, state: EligibilityState) -> str:
    """Button text shown for a group in the browse view."""
    if state == EligibilityState.ALREADY_BOOKED:
        return "Already Booked"
    if state == EligibilityState.FULL:
        return "Full"
    if group.is_recurring:
        return f"Book All {len(group)} Sessions"
    return "Book Now"
