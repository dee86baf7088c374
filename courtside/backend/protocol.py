"""The Booking Backend contract the core calls through."""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from courtside.schemas.booking_schema import BookingIntent
from courtside.schemas.payment_schema import BookingResult, Voucher
from courtside.schemas.session_schema import ClassSessionOccurrence


class BookingBackend(Protocol):
    """Owns capacity, registrations, wallet balance and voucher redemption.

    Implementations raise ``courtside.backend.errors.BackendError``
    subclasses on failure.
    """

    async def fetch_available_sessions(
        self, start: datetime, end: datetime
    ) -> list[ClassSessionOccurrence]: ...

    async def fetch_wallet_balance(self) -> Decimal: ...

    async def initialize_wallet(self) -> None: ...

    async def fetch_active_vouchers(self) -> list[Voucher]: ...

    async def submit(self, intent: BookingIntent) -> BookingResult:
        """Send one intent to its single endpoint."""
        ...
