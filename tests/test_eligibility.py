"""Tests for per-group booking eligibility."""

from courtside.sessions.aggregator import group_sessions
from courtside.sessions.eligibility import EligibilityState, booking_label, evaluate
from tests.conftest import ACTING_USER, make_occurrence, make_registration, make_weekly_course


def _group(occurrences):
    return group_sessions(occurrences)[0]


class TestEvaluate:
    def test_open_group_is_bookable(self):
        assert evaluate(_group(make_weekly_course()), ACTING_USER) == EligibilityState.BOOKABLE

    def test_registration_on_any_member_is_already_booked(self):
        course = make_weekly_course(weeks=3)
        course[2] = course[2].model_copy(
            update={"registrations": (make_registration(),)}
        )
        assert evaluate(_group(course), ACTING_USER) == EligibilityState.ALREADY_BOOKED

    def test_registration_wins_over_capacity(self):
        occ = make_occurrence(
            status="FULL", current_participants=8, max_participants=8,
            registrations=(make_registration(),),
        )
        assert evaluate(_group([occ]), ACTING_USER) == EligibilityState.ALREADY_BOOKED

    def test_all_members_full_is_full(self):
        course = make_weekly_course(current_participants=8, max_participants=8)
        assert evaluate(_group(course), ACTING_USER) == EligibilityState.FULL

    def test_full_status_counts_as_capacity(self):
        occ = make_occurrence(status="FULL", current_participants=2, max_participants=8)
        assert evaluate(_group([occ]), ACTING_USER) == EligibilityState.FULL

    def test_one_open_member_keeps_group_bookable(self):
        course = make_weekly_course(weeks=3, current_participants=8, max_participants=8)
        course[1] = course[1].model_copy(update={"current_participants": 3})
        assert evaluate(_group(course), ACTING_USER) == EligibilityState.BOOKABLE

    def test_string_and_numeric_user_ids_compare_equal(self):
        occ = make_occurrence(registrations=(make_registration(user_id="7"),))
        assert evaluate(_group([occ]), 7) == EligibilityState.ALREADY_BOOKED
        assert evaluate(_group([occ]), "7") == EligibilityState.ALREADY_BOOKED

    def test_other_users_registration_ignored(self):
        occ = make_occurrence(registrations=(make_registration(user_id=99),))
        assert evaluate(_group([occ]), ACTING_USER) == EligibilityState.BOOKABLE


class TestBookingLabel:
    def test_recurring_group_label_counts_sessions(self):
        group = _group(make_weekly_course(weeks=4))
        assert booking_label(group, EligibilityState.BOOKABLE) == "Book All 4 Sessions"

    def test_singleton_label(self):
        group = _group([make_occurrence()])
        assert booking_label(group, EligibilityState.BOOKABLE) == "Book Now"

    def test_blocked_labels(self):
        group = _group([make_occurrence()])
        assert booking_label(group, EligibilityState.ALREADY_BOOKED) == "Already Booked"
        assert booking_label(group, EligibilityState.FULL) == "Full"
