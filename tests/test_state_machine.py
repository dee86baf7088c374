"""Tests for the payment state machine."""

import pytest

from courtside.payment.state_machine import (
    InvalidTransitionError,
    PaymentState,
    PaymentStateMachine,
    PaymentTrigger,
)


def _to_submitting(sm: PaymentStateMachine) -> None:
    sm.transition(PaymentTrigger.SUBMIT_REQUESTED)
    sm.transition(PaymentTrigger.VALIDATION_PASSED)


class TestInitialState:
    def test_starts_idle(self, state_machine):
        assert state_machine.current_state == PaymentState.IDLE

    def test_initial_history_has_one_entry(self, state_machine):
        assert len(state_machine.get_history()) == 1

    def test_not_in_flight_or_terminal(self, state_machine):
        assert not state_machine.in_flight
        assert not state_machine.is_terminal()


class TestHappyPath:
    def test_submit_goes_to_validating(self, state_machine):
        new = state_machine.transition(PaymentTrigger.SUBMIT_REQUESTED)
        assert new == PaymentState.VALIDATING
        assert state_machine.in_flight

    def test_validation_passed_goes_to_submitting(self, state_machine):
        _to_submitting(state_machine)
        assert state_machine.current_state == PaymentState.SUBMITTING
        assert state_machine.in_flight

    def test_backend_success_is_terminal(self, state_machine):
        _to_submitting(state_machine)
        state_machine.transition(PaymentTrigger.BACKEND_SUCCEEDED)
        assert state_machine.current_state == PaymentState.SUCCEEDED
        assert state_machine.is_terminal()
        assert not state_machine.in_flight

    def test_state_trace(self, state_machine):
        _to_submitting(state_machine)
        state_machine.transition(PaymentTrigger.BACKEND_SUCCEEDED)
        assert state_machine.get_state_trace() == [
            "idle", "validating", "submitting", "succeeded",
        ]


class TestFailures:
    def test_validation_failure_is_recoverable(self, state_machine):
        state_machine.transition(PaymentTrigger.SUBMIT_REQUESTED)
        new = state_machine.transition(PaymentTrigger.VALIDATION_FAILED)
        assert new == PaymentState.FAILED_RECOVERABLE
        assert state_machine.failure_count == 1

    def test_recoverable_can_retry(self, state_machine):
        _to_submitting(state_machine)
        state_machine.transition(PaymentTrigger.BACKEND_RECOVERABLE_ERROR)
        new = state_machine.transition(PaymentTrigger.SUBMIT_REQUESTED)
        assert new == PaymentState.VALIDATING

    def test_fatal_cannot_retry_directly(self, state_machine):
        _to_submitting(state_machine)
        state_machine.transition(PaymentTrigger.BACKEND_FATAL_ERROR)
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(PaymentTrigger.SUBMIT_REQUESTED)

    def test_fatal_then_new_attempt(self, state_machine):
        _to_submitting(state_machine)
        state_machine.transition(PaymentTrigger.BACKEND_FATAL_ERROR)
        assert state_machine.transition(PaymentTrigger.NEW_ATTEMPT) == PaymentState.IDLE

    def test_failure_count_accumulates(self, state_machine):
        for _ in range(3):
            state_machine.transition(PaymentTrigger.SUBMIT_REQUESTED)
            state_machine.transition(PaymentTrigger.VALIDATION_FAILED)
        assert state_machine.failure_count == 3


class TestGuards:
    def test_cannot_submit_twice_while_in_flight(self, state_machine):
        state_machine.transition(PaymentTrigger.SUBMIT_REQUESTED)
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(PaymentTrigger.SUBMIT_REQUESTED)

    def test_cancel_from_submitting_returns_to_idle(self, state_machine):
        _to_submitting(state_machine)
        assert state_machine.transition(PaymentTrigger.CANCELLED) == PaymentState.IDLE

    def test_success_is_final(self, state_machine):
        _to_submitting(state_machine)
        state_machine.transition(PaymentTrigger.BACKEND_SUCCEEDED)
        assert state_machine.get_valid_triggers() == []
        with pytest.raises(InvalidTransitionError, match="No valid transition"):
            state_machine.transition(PaymentTrigger.NEW_ATTEMPT)

    def test_backend_result_requires_submitting(self, state_machine):
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(PaymentTrigger.BACKEND_SUCCEEDED)
