"""Voucher, equipment, funding and Backend result models."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from pydantic import ConfigDict, Field, field_validator

from courtside.schemas.session_schema import BackendModel
from courtside.utils import to_money


class DiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class FundingMethod(str, Enum):
    WALLET = "wallet"
    CARD = "card"


class Voucher(BackendModel):
    """A redeemed discount credential, as listed by the active-vouchers endpoint."""

    id: Union[int, str]
    discount_type: DiscountType
    discount_value: Decimal
    expiry_date: Optional[date] = None
    voucher_code: Optional[str] = None
    voucher_title: Optional[str] = None

    @field_validator("discount_type", mode="before")
    @classmethod
    def _upper_discount_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("discount_value", mode="before")
    @classmethod
    def _non_negative(cls, value: Any) -> Decimal:
        amount = Decimal(str(value))
        if amount < 0:
            raise ValueError(f"discount value must be >= 0, got {amount}")
        return amount

    def is_expired(self, today: date) -> bool:
        return self.expiry_date is not None and self.expiry_date < today


class EquipmentSelection(BackendModel):
    """Paddle rental and ball-set purchase for a booking attempt."""

    num_paddles: int = Field(default=0, ge=0)
    buy_ball_set: bool = False

    @property
    def is_empty(self) -> bool:
        return self.num_paddles == 0 and not self.buy_ball_set


class BookingResult(BackendModel):
    """Authoritative totals returned by a successful submission.

    Endpoint-specific fields (booking record, event registration, payment
    record) are kept as extras and reachable through ``raw``.
    """

    model_config = ConfigDict(extra="allow")

    total_amount: Optional[Decimal] = None
    points_earned: Optional[int] = None
    current_tier_point_balance: Optional[int] = None
    current_reward_point_balance: Optional[int] = None

    @field_validator("total_amount", mode="before")
    @classmethod
    def _money(cls, value: Any) -> Optional[Decimal]:
        return None if value is None else to_money(value)

    @property
    def raw(self) -> dict[str, Any]:
        return dict(self.model_extra or {})
