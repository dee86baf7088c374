"""
Browse-view filtering of class-session occurrences.

Field filters run on the flat occurrence list before grouping. The
``show_full`` switch works on whole groups once grouping is done, so a
recurring course with some FULL weeks keeps every member.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from courtside.schemas.session_schema import ClassSessionOccurrence, SessionStatus
from courtside.sessions.aggregator import SessionGroup

logger = logging.getLogger(__name__)


class PriceRange(str, Enum):
    UNDER_100 = "under_100"
    FROM_100_TO_500 = "100-500"
    FROM_500_TO_1000 = "500-1000"
    OVER_1000 = "over_1000"

    def contains(self, price: Decimal) -> bool:
        if self == PriceRange.UNDER_100:
            return price < 100
        if self == PriceRange.FROM_100_TO_500:
            return 100 <= price <= 500
        if self == PriceRange.FROM_500_TO_1000:
            return 500 <= price <= 1000
        return price > 1000


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    def contains(self, hour: int) -> bool:
        if self == TimeOfDay.MORNING:
            return 6 <= hour < 12
        if self == TimeOfDay.AFTERNOON:
            return 12 <= hour < 18
        return hour >= 18 or hour < 6


DAYS_OF_WEEK = (
    "Monday", "Tuesday", "Wednesday", "Thursday",
    "Friday", "Saturday", "Sunday",
)


@dataclass(frozen=True)
class SessionFilter:
    """Browse filters. ``None`` means no restriction on that field."""

    state: Optional[str] = None
    venue: Optional[str] = None
    coach: Optional[str] = None
    session_type: Optional[str] = None
    price_range: Optional[PriceRange] = None
    time_of_day: Optional[TimeOfDay] = None
    day_of_week: Optional[str] = None
    show_full: bool = True

    def __post_init__(self) -> None:
        if self.day_of_week is not None and self.day_of_week not in DAYS_OF_WEEK:
            raise ValueError(
                f"Unknown day of week: {self.day_of_week!r}. Valid: {list(DAYS_OF_WEEK)}"
            )

    def matches(self, occurrence: ClassSessionOccurrence) -> bool:
        if self.state is not None and occurrence.venue_state != self.state:
            return False
        if self.venue is not None and occurrence.venue_name != self.venue:
            return False
        if self.coach is not None and occurrence.coach_name != self.coach:
            return False
        if self.session_type is not None and occurrence.title != self.session_type:
            return False
        if self.price_range is not None and not self.price_range.contains(occurrence.price):
            return False
        if self.time_of_day is not None and not self.time_of_day.contains(
            occurrence.start_time.hour
        ):
            return False
        if self.day_of_week is not None:
            if DAYS_OF_WEEK[occurrence.start_time.weekday()] != self.day_of_week:
                return False
        return True

    def apply(
        self, occurrences: Iterable[ClassSessionOccurrence]
    ) -> list[ClassSessionOccurrence]:
        """Return the occurrences that pass every filter, in input order."""
        kept = [o for o in occurrences if self.matches(o)]
        logger.debug("Session filter kept %d occurrences", len(kept))
        return kept

    def apply_to_groups(self, groups: Iterable[SessionGroup]) -> list[SessionGroup]:
        """Drop groups whose every member is FULL when full courses are hidden."""
        if self.show_full:
            return list(groups)
        return [
            g for g in groups
            if not all(o.status == SessionStatus.FULL for o in g.occurrences)
        ]


def filter_options(occurrences: Iterable[ClassSessionOccurrence]) -> dict[str, list[str]]:
    """Distinct values available for each selector, in first-seen order."""
    options: dict[str, dict[str, None]] = {
        "states": {}, "venues": {}, "coaches": {}, "session_types": {},
    }
    for o in occurrences:
        for name, value in (
            ("states", o.venue_state),
            ("venues", o.venue_name),
            ("coaches", o.coach_name),
            ("session_types", o.title),
        ):
            if value and value != "-":
                options[name][value] = None
    return {name: list(values) for name, values in options.items()}


def status_counts(occurrences: Iterable[ClassSessionOccurrence]) -> dict[SessionStatus, int]:
    """Number of occurrences per status."""
    return dict(Counter(o.status for o in occurrences))
