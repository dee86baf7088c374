"""Class-session occurrence and registration models as ingested from the Backend."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from courtside.utils import UserId, normalize_user_id, to_money


class SessionStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    FULL = "FULL"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class BackendModel(BaseModel):
    """Base for immutable records that arrive camelCased over the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Registration(BackendModel):
    """One user's enrollment in one occurrence."""

    registration_id: Union[int, str]
    user_id: UserId
    member_name: str = ""

    @field_validator("user_id", mode="before")
    @classmethod
    def _normalize_user_id(cls, value: Any) -> UserId:
        return normalize_user_id(value)


class ClassSessionOccurrence(BackendModel):
    """One concrete bookable class-session time slot."""

    id: int
    recurring_group_id: Union[int, str, None] = None
    coach_id: Union[int, str, None] = None
    coach_name: str = "-"
    venue_name: str = "-"
    venue_state: str = "-"
    court_name: str = "-"
    title: str = "-"
    start_time: datetime
    end_time: datetime
    price: Decimal = Decimal("0")
    status: SessionStatus = SessionStatus.AVAILABLE
    current_participants: int = 0
    max_participants: int = 1
    registrations: tuple[Registration, ...] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def _flatten_backend_shape(cls, data: Any) -> Any:
        """Apply the field fallbacks the session list endpoints rely on."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        coach = data.pop("coach", None) or {}
        court = data.pop("court", None) or {}
        if not data.get("coachName") and coach.get("name"):
            data["coachName"] = coach["name"]
        if data.get("coachId") is None and coach.get("id") is not None:
            data["coachId"] = coach["id"]
        if not data.get("courtName") and court.get("name"):
            data["courtName"] = court["name"]
        if not data.get("title") and data.get("type"):
            data["title"] = data["type"]
        if not data.get("venueName") and data.get("venue"):
            data["venueName"] = data["venue"]
        if not data.get("venueState") and data.get("state"):
            data["venueState"] = data["state"]
        # Null-valued fields fall back to their defaults
        return {key: value for key, value in data.items() if value is not None}

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("price", mode="before")
    @classmethod
    def _money(cls, value: Any) -> Decimal:
        return to_money(value)

    @property
    def is_standalone(self) -> bool:
        return self.recurring_group_id is None

    @property
    def group_key(self) -> str:
        """Lookup key: the recurring group id, or ``single_<id>`` for a standalone occurrence."""
        if self.recurring_group_id is None:
            return f"single_{self.id}"
        return str(self.recurring_group_id)

    @property
    def partition_key(self) -> tuple[str, Union[int, str]]:
        """Grouping key that keeps recurring and standalone ids apart."""
        if self.recurring_group_id is None:
            return ("single", self.id)
        return ("recurring", str(self.recurring_group_id))

    @property
    def is_at_capacity(self) -> bool:
        """Cached status and live counts may disagree, so either signals capacity."""
        return (
            self.status == SessionStatus.FULL
            or self.current_participants >= self.max_participants
        )

    def is_registered(self, user_id: UserId) -> bool:
        return any(r.user_id == user_id for r in self.registrations)
