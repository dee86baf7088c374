from courtside.sessions.aggregator import SessionGroup, find_group, group_sessions
from courtside.sessions.board import BoardEntry, SessionBoard
from courtside.sessions.eligibility import EligibilityState, booking_label, evaluate
from courtside.sessions.filters import PriceRange, SessionFilter, TimeOfDay

__all__ = [
    "SessionGroup",
    "group_sessions",
    "find_group",
    "EligibilityState",
    "evaluate",
    "booking_label",
    "SessionFilter",
    "PriceRange",
    "TimeOfDay",
    "SessionBoard",
    "BoardEntry",
]
