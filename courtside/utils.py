"""Shared utilities used across the booking core."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from courtside.config import settings

UserId = Union[int, str]


def normalize_user_id(value: Union[int, float, str]) -> UserId:
    """Normalize a user id that may arrive as a number or a string.

    Examples:
        >>> normalize_user_id("42")
        42
        >>> normalize_user_id(" 42 ")
        42
        >>> normalize_user_id("usr_7")
        'usr_7'
    """
    if isinstance(value, bool):
        raise TypeError(f"Invalid user id: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    if not text:
        raise ValueError("User id must not be empty")
    return text


def to_money(value: Union[Decimal, int, float, str], places: Optional[int] = None) -> Decimal:
    """Convert a value to a Decimal quantized to the configured money precision.

    Floats go through ``str`` so binary noise never reaches the result.

    Examples:
        >>> to_money("20")
        Decimal('20.00')
        >>> to_money(0.1)
        Decimal('0.10')
    """
    if places is None:
        places = settings.pricing.money_places
    if isinstance(value, float):
        value = str(value)
    exponent = Decimal(1).scaleb(-places)
    return Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    """Render an amount with the configured currency prefix, e.g. ``RM82.00``."""
    return f"{settings.pricing.currency}{to_money(amount)}"
