"""Tests for the session board state container."""

from datetime import timedelta

import pytest

from courtside.backend.memory import InMemoryBackend
from courtside.schemas.session_schema import SessionStatus
from courtside.sessions.board import SessionBoard
from courtside.sessions.eligibility import EligibilityState
from courtside.sessions.filters import SessionFilter
from tests.conftest import (
    ACTING_USER,
    BASE_TIME,
    make_occurrence,
    make_registration,
    make_weekly_course,
)

NOW = BASE_TIME - timedelta(hours=1)


@pytest.fixture
def board_backend():
    return InMemoryBackend(
        user_id=ACTING_USER,
        sessions=make_weekly_course(weeks=3) + [
            make_occurrence(id=200, status="FULL", current_participants=8),
            make_occurrence(id=300, registrations=(make_registration(),)),
        ],
    )


class TestRefresh:
    @pytest.mark.asyncio
    async def test_builds_one_entry_per_group(self, board_backend):
        board = SessionBoard(board_backend, ACTING_USER)
        entries = await board.refresh(now=NOW)
        assert [e.group.key for e in entries] == ["9", "single_200", "single_300"]
        assert len(board.occurrences) == 5

    @pytest.mark.asyncio
    async def test_entries_carry_eligibility_and_label(self, board_backend):
        board = SessionBoard(board_backend, ACTING_USER)
        await board.refresh(now=NOW)
        course = board.get_entry("9")
        assert course.can_book
        assert course.label == "Book All 3 Sessions"
        assert board.get_entry("single_200").eligibility == EligibilityState.FULL
        assert board.get_entry("single_300").label == "Already Booked"

    @pytest.mark.asyncio
    async def test_refresh_replaces_snapshot(self, board_backend):
        board = SessionBoard(board_backend, ACTING_USER)
        await board.refresh(now=NOW)
        del board_backend.sessions[300]
        await board.refresh(now=NOW)
        assert board.get_entry("single_300") is None

    @pytest.mark.asyncio
    async def test_window_excludes_past_sessions(self, board_backend):
        board = SessionBoard(board_backend, ACTING_USER)
        await board.refresh(now=BASE_TIME + timedelta(days=1))
        assert board.get_entry("9").group.occurrence_ids == [101, 102]


class TestApplyFilter:
    @pytest.mark.asyncio
    async def test_filter_reuses_snapshot(self, board_backend):
        board = SessionBoard(board_backend, ACTING_USER)
        await board.refresh(now=NOW)
        entries = board.apply_filter(SessionFilter(show_full=False))
        assert "single_200" not in [e.group.key for e in entries]
        assert board.session_filter.show_full is False

    @pytest.mark.asyncio
    async def test_status_summary_ignores_filter(self, board_backend):
        board = SessionBoard(board_backend, ACTING_USER, session_filter=SessionFilter(show_full=False))
        await board.refresh(now=NOW)
        assert board.status_summary()[SessionStatus.FULL] == 1
