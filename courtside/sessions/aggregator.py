"""
Groups raw class-session occurrences into bookable units.

Occurrences generated from one recurring class definition share a
``recurring_group_id`` and are booked together; every other occurrence
becomes a singleton group keyed ``single_<id>``. Groups are rebuilt from
scratch on every fetch and never mutated afterwards.

Usage:
    groups = group_sessions(occurrences)
    for group in groups:
        print(group.key, group.title, group.date_range_label)
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Union

from courtside.schemas.session_schema import ClassSessionOccurrence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionGroup:
    """A non-empty, date-ascending run of occurrences booked as one unit."""

    key: str
    occurrences: tuple[ClassSessionOccurrence, ...]

    def __post_init__(self) -> None:
        if not self.occurrences:
            raise ValueError(f"Session group '{self.key}' must not be empty")

    def __len__(self) -> int:
        return len(self.occurrences)

    @property
    def recurring_group_id(self) -> Union[int, str, None]:
        return self.first.recurring_group_id

    @property
    def is_recurring(self) -> bool:
        return self.recurring_group_id is not None

    @property
    def first(self) -> ClassSessionOccurrence:
        """Earliest occurrence; the group's representative metadata comes from it."""
        return self.occurrences[0]

    @property
    def coach_name(self) -> str:
        return self.first.coach_name

    @property
    def venue_name(self) -> str:
        return self.first.venue_name

    @property
    def title(self) -> str:
        return self.first.title

    @property
    def occurrence_ids(self) -> list[int]:
        return [o.id for o in self.occurrences]

    @property
    def total_price(self) -> Decimal:
        return sum((o.price for o in self.occurrences), Decimal("0"))

    @property
    def date_range(self) -> tuple[date, date]:
        dates = [o.start_time.date() for o in self.occurrences]
        return min(dates), max(dates)

    @property
    def date_range_label(self) -> str:
        start, end = self.date_range
        if start == end:
            return start.isoformat()
        return f"{start.isoformat()} to {end.isoformat()}"


def _sort_key(occurrence: ClassSessionOccurrence):
    return occurrence.start_time


def group_sessions(occurrences: Iterable[ClassSessionOccurrence]) -> list[SessionGroup]:
    """Partition occurrences into SessionGroups.

    Groups are returned in order of first appearance in the input. Members
    within a group are sorted by start time; the sort is stable, so
    occurrences starting at the same moment keep their input order.
    """
    buckets: dict[tuple, list[ClassSessionOccurrence]] = {}
    for occurrence in occurrences:
        buckets.setdefault(occurrence.partition_key, []).append(occurrence)

    groups = [
        SessionGroup(key=members[0].group_key, occurrences=tuple(sorted(members, key=_sort_key)))
        for members in buckets.values()
    ]
    logger.debug(
        "Grouped %d occurrences into %d groups",
        sum(len(g) for g in groups), len(groups),
    )
    return groups


def find_group(groups: Iterable[SessionGroup], key: str) -> Optional[SessionGroup]:
    """Look up a group by its key."""
    for group in groups:
        if group.key == key:
            return group
    return None
