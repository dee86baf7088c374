"""HTTP client for the Booking Backend REST API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable

import httpx
from pydantic import ValidationError

from courtside.backend.errors import (
    BackendAuthError,
    BackendConflictError,
    BackendConnectionError,
    BackendNotFoundError,
    BackendRequestError,
)
from courtside.config import BackendConfig, settings
from courtside.logging_context import get_attempt_logger
from courtside.schemas.booking_schema import BookingIntent, describe_intent
from courtside.schemas.payment_schema import BookingResult, Voucher
from courtside.schemas.session_schema import ClassSessionOccurrence
from courtside.utils import to_money

logger = get_attempt_logger(__name__)

TokenProvider = Callable[[], str]


def _error_message(response: httpx.Response) -> str:
    """Pull the Backend's human-readable message out of an error response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    text = response.text.strip()
    return text or f"backend_error_{response.status_code}"


class HttpBookingBackend:
    """Booking Backend reached over HTTP with a bearer credential.

    The credential is owned by the authentication collaborator; it is read
    through ``token_provider`` on every call so a refreshed token is picked
    up without rebuilding the client.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        config: BackendConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or settings.backend
        self._token_provider = token_provider
        self.http = http or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(
                connect=self.config.connect_timeout_sec,
                read=self.config.read_timeout_sec,
                write=self.config.connect_timeout_sec,
                pool=self.config.connect_timeout_sec,
            ),
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> HttpBookingBackend:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"Accept": "application/json"}
        token = self._token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self.http.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TimeoutException as exc:
            raise BackendConnectionError(
                f"backend_timeout: Request to {path} timed out"
            ) from exc
        except httpx.HTTPError as exc:
            raise BackendConnectionError(f"backend_connection_failed: {exc}") from exc

        if response.status_code >= 400:
            message = _error_message(response)
            logger.debug("%s %s -> %d: %s", method, path, response.status_code, message)
            if response.status_code in {401, 403}:
                raise BackendAuthError(message, response.status_code)
            if response.status_code == 404:
                raise BackendNotFoundError(message, response.status_code)
            if response.status_code == 409:
                raise BackendConflictError(message, response.status_code)
            raise BackendRequestError(message, response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendRequestError(
                f"backend_invalid_json: {path}", response.status_code
            ) from exc

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def fetch_available_sessions(
        self, start: datetime, end: datetime
    ) -> list[ClassSessionOccurrence]:
        data = await self.call(
            "GET",
            "/class-sessions/available",
            params={"start": start.isoformat(), "end": end.isoformat()},
        )
        if not isinstance(data, list):
            logger.warning("Unexpected session list payload: %s", type(data).__name__)
            return []
        return [ClassSessionOccurrence.model_validate(item) for item in data]

    async def fetch_wallet_balance(self) -> Decimal:
        data = await self.call("GET", "/wallet/balance")
        if not isinstance(data, dict) or data.get("balance") is None:
            raise BackendRequestError("backend_invalid_payload: wallet balance missing")
        return to_money(data["balance"])

    async def initialize_wallet(self) -> None:
        await self.call("POST", "/wallet/init", json={})
        logger.info("Wallet initialized")

    async def fetch_active_vouchers(self) -> list[Voucher]:
        data = await self.call("GET", "/vouchers/active")
        if not isinstance(data, list):
            return []
        return [Voucher.model_validate(item) for item in data]

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    async def submit(self, intent: BookingIntent) -> BookingResult:
        logger.info("Submitting %s to %s", describe_intent(intent), intent.path)
        data = await self.call("POST", intent.path, json=intent.to_payload())
        if not isinstance(data, dict):
            data = {"response": data}
        try:
            return BookingResult.model_validate(data)
        except ValidationError as exc:
            # The Backend has already acted; surface the bad body as a Backend error
            raise BackendRequestError(
                f"backend_invalid_payload: {intent.path}: {exc.error_count()} invalid field(s)"
            ) from exc
