"""Booking targets and the submission-ready BookingIntent variants.

A target is what the user is paying for. An intent is the fully resolved
request for one payment attempt; exactly one intent class exists per
Backend endpoint, so an intent can never describe two submissions.
"""

import uuid
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Literal, Union

from pydantic import Field, field_validator

from courtside.schemas.session_schema import BackendModel
from courtside.utils import to_money


class BookingKind(str, Enum):
    COURT = "court"
    CLASS_SESSION = "class_session"
    EVENT = "event"
    REPLACEMENT_SESSION = "replacement_session"


# ---------------------------------------------------------------------- #
# Targets not derived from the class-session list
# ---------------------------------------------------------------------- #


class CourtSlotTarget(BackendModel):
    """A court booking chosen on the court availability view."""

    slot_ids: tuple[int, ...] = Field(min_length=1)
    price: Decimal
    purpose: str = "Recreational"
    number_of_players: int = Field(default=4, ge=1)
    duration_hours: int = Field(default=1, ge=1)
    court_name: str = ""
    date: str = ""
    start_time: str = ""
    end_time: str = ""

    @field_validator("price", mode="before")
    @classmethod
    def _money(cls, value: Any) -> Decimal:
        return to_money(value)


class EventTarget(BackendModel):
    event_id: int
    fee: Decimal = Decimal("0")
    title: str = ""

    @field_validator("fee", mode="before")
    @classmethod
    def _money(cls, value: Any) -> Decimal:
        return to_money(value)


class ReplacementSessionTarget(BackendModel):
    """Payment for a replacement class offered after a cancellation."""

    session_id: int
    amount: Decimal
    title: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def _money(cls, value: Any) -> Decimal:
        return to_money(value)


# ---------------------------------------------------------------------- #
# Intents
# ---------------------------------------------------------------------- #


def _new_attempt_id() -> str:
    return f"ATT-{uuid.uuid4().hex[:10]}"


class _IntentBase(BackendModel):
    attempt_id: str = Field(default_factory=_new_attempt_id)

    # Fields that describe the attempt rather than the request body
    local_fields: ClassVar[frozenset[str]] = frozenset({"kind", "attempt_id"})

    @property
    def path(self) -> str:
        raise NotImplementedError

    def to_payload(self) -> dict[str, Any]:
        """Request body exactly as the Backend endpoint expects it."""
        return self.model_dump(by_alias=True, mode="json", exclude=set(self.local_fields))


class CourtBookingIntent(_IntentBase):
    kind: Literal["court"] = "court"
    slot_ids: tuple[int, ...]
    purpose: str
    number_of_players: int
    num_paddles: int
    buy_ball_set: bool
    duration_hours: int
    use_wallet: bool
    use_voucher: bool = False
    voucher_redemption_id: Union[int, str, None] = None

    @property
    def path(self) -> str:
        return "/member/bookings"


class SessionRegistrationIntent(_IntentBase):
    kind: Literal["class_session"] = "class_session"
    session_id: int
    use_wallet: bool
    num_paddles: int
    buy_ball_set: bool
    use_voucher: Literal[False] = False
    voucher_redemption_id: None = None

    local_fields: ClassVar[frozenset[str]] = frozenset({"kind", "attempt_id", "session_id"})

    @property
    def path(self) -> str:
        return f"/class-sessions/{self.session_id}/register"


class MultiSessionRegistrationIntent(_IntentBase):
    """All occurrences of a recurring group in one atomic request."""

    kind: Literal["multi_session"] = "multi_session"
    session_ids: tuple[int, ...] = Field(min_length=1)
    payment_method: str
    num_paddles: int
    buy_ball_set: bool

    @property
    def path(self) -> str:
        return "/class-sessions/register-multi"


class EventRegistrationIntent(_IntentBase):
    kind: Literal["event"] = "event"
    event_id: int
    use_wallet: bool

    @property
    def path(self) -> str:
        return "/event-registration/register"


class ReplacementPaymentIntent(_IntentBase):
    kind: Literal["replacement_session"] = "replacement_session"
    session_id: int
    amount: Decimal
    use_wallet: bool
    use_voucher: Literal[False] = False
    voucher_redemption_id: None = None

    @property
    def path(self) -> str:
        return "/member/replacement-session-payment"


BookingIntent = Union[
    CourtBookingIntent,
    SessionRegistrationIntent,
    MultiSessionRegistrationIntent,
    EventRegistrationIntent,
    ReplacementPaymentIntent,
]


def describe_intent(intent: BookingIntent) -> str:
    """Short human-readable summary used in log lines."""
    if isinstance(intent, MultiSessionRegistrationIntent):
        return f"{intent.kind} x{len(intent.session_ids)}"
    if isinstance(intent, (SessionRegistrationIntent, ReplacementPaymentIntent)):
        return f"{intent.kind} #{intent.session_id}"
    if isinstance(intent, EventRegistrationIntent):
        return f"{intent.kind} #{intent.event_id}"
    return f"{intent.kind} slots={list(intent.slot_ids)}"

