"""
Session board: the state container behind the class browse view.

Each ``refresh()`` fetches the occurrence list once, then filters, groups
and evaluates eligibility as pure steps over that snapshot. The previous
snapshot is replaced, never patched, and nothing here marks a group as
booked before the Backend says so.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from courtside.backend.protocol import BookingBackend
from courtside.config import settings
from courtside.schemas.session_schema import ClassSessionOccurrence, SessionStatus
from courtside.sessions.aggregator import SessionGroup, group_sessions
from courtside.sessions.eligibility import EligibilityState, booking_label, evaluate
from courtside.sessions.filters import SessionFilter, status_counts
from courtside.utils import normalize_user_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardEntry:
    """One bookable unit as shown on the board."""

    group: SessionGroup
    eligibility: EligibilityState

    @property
    def can_book(self) -> bool:
        return self.eligibility == EligibilityState.BOOKABLE

    @property
    def label(self) -> str:
        return booking_label(self.group, self.eligibility)


class SessionBoard:
    """Fetches occurrences and derives the grouped, annotated browse list."""

    def __init__(
        self,
        backend: BookingBackend,
        acting_user_id: Union[int, str],
        session_filter: Optional[SessionFilter] = None,
        window_days: Optional[int] = None,
    ) -> None:
        self._backend = backend
        self._user_id = normalize_user_id(acting_user_id)
        self._filter = session_filter or SessionFilter()
        self._window = timedelta(
            days=window_days or settings.backend.session_window_days
        )
        self._occurrences: tuple[ClassSessionOccurrence, ...] = ()
        self._entries: tuple[BoardEntry, ...] = ()

    @property
    def entries(self) -> tuple[BoardEntry, ...]:
        return self._entries

    @property
    def occurrences(self) -> tuple[ClassSessionOccurrence, ...]:
        return self._occurrences

    @property
    def session_filter(self) -> SessionFilter:
        return self._filter

    async def refresh(self, now: Optional[datetime] = None) -> tuple[BoardEntry, ...]:
        """Fetch the occurrence window and rebuild the board."""
        start = now or datetime.now(timezone.utc)
        occurrences = await self._backend.fetch_available_sessions(start, start + self._window)
        self._occurrences = tuple(occurrences)
        self._entries = self._build()
        logger.info(
            "Session board refreshed: %d occurrences, %d groups",
            len(self._occurrences), len(self._entries),
        )
        return self._entries

    def apply_filter(self, session_filter: SessionFilter) -> tuple[BoardEntry, ...]:
        """Re-derive the board from the current snapshot with a new filter."""
        self._filter = session_filter
        self._entries = self._build()
        return self._entries

    def _build(self) -> tuple[BoardEntry, ...]:
        filtered = self._filter.apply(self._occurrences)
        groups = self._filter.apply_to_groups(group_sessions(filtered))
        return tuple(BoardEntry(group=g, eligibility=evaluate(g, self._user_id)) for g in groups)

    def get_entry(self, key: str) -> Optional[BoardEntry]:
        for entry in self._entries:
            if entry.group.key == key:
                return entry
        return None

    def status_summary(self) -> dict[SessionStatus, int]:
        return status_counts(self._occurrences)
