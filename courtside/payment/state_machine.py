"""
Finite state machine for one payment flow.

    IDLE -> VALIDATING -> SUBMITTING -> SUCCEEDED
                      \\            \\-> FAILED_RECOVERABLE | FAILED_FATAL
                       \\-> FAILED_RECOVERABLE

Every transition is explicit. A recoverable failure can be retried (which
re-validates); a fatal failure ends the attempt until the user starts a
new one. Cancelling while submitting discards the pending result and
returns to IDLE.

Usage:
    sm = PaymentStateMachine()
    sm.transition(PaymentTrigger.SUBMIT_REQUESTED)
    assert sm.current_state == PaymentState.VALIDATING
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class PaymentState(str, Enum):
    """All possible states of a payment flow."""
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED_RECOVERABLE = "failed_recoverable"
    FAILED_FATAL = "failed_fatal"


class PaymentTrigger(str, Enum):
    """Events that cause state transitions."""
    SUBMIT_REQUESTED = "submit_requested"
    VALIDATION_PASSED = "validation_passed"
    VALIDATION_FAILED = "validation_failed"
    BACKEND_SUCCEEDED = "backend_succeeded"
    BACKEND_RECOVERABLE_ERROR = "backend_recoverable_error"
    BACKEND_FATAL_ERROR = "backend_fatal_error"
    CANCELLED = "cancelled"
    NEW_ATTEMPT = "new_attempt"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: PaymentState
    to_state: PaymentState
    trigger: PaymentTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: PaymentState
    entered_at: datetime
    trigger: Optional[PaymentTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class PaymentStateMachine:
    """Deterministic state machine guarding a payment flow."""

    TRANSITIONS: list[Transition] = [
        # --- Start / retry ---
        Transition(PaymentState.IDLE, PaymentState.VALIDATING,
                   PaymentTrigger.SUBMIT_REQUESTED),
        Transition(PaymentState.FAILED_RECOVERABLE, PaymentState.VALIDATING,
                   PaymentTrigger.SUBMIT_REQUESTED),

        # --- Local validation ---
        Transition(PaymentState.VALIDATING, PaymentState.SUBMITTING,
                   PaymentTrigger.VALIDATION_PASSED),
        Transition(PaymentState.VALIDATING, PaymentState.FAILED_RECOVERABLE,
                   PaymentTrigger.VALIDATION_FAILED),

        # --- Backend result ---
        Transition(PaymentState.SUBMITTING, PaymentState.SUCCEEDED,
                   PaymentTrigger.BACKEND_SUCCEEDED),
        Transition(PaymentState.SUBMITTING, PaymentState.FAILED_RECOVERABLE,
                   PaymentTrigger.BACKEND_RECOVERABLE_ERROR),
        Transition(PaymentState.SUBMITTING, PaymentState.FAILED_FATAL,
                   PaymentTrigger.BACKEND_FATAL_ERROR),

        # --- Abandoned while in flight ---
        Transition(PaymentState.SUBMITTING, PaymentState.IDLE,
                   PaymentTrigger.CANCELLED),

        # --- User starts over after a fatal failure ---
        Transition(PaymentState.FAILED_FATAL, PaymentState.IDLE,
                   PaymentTrigger.NEW_ATTEMPT),
        Transition(PaymentState.FAILED_RECOVERABLE, PaymentState.IDLE,
                   PaymentTrigger.NEW_ATTEMPT),
    ]

    TERMINAL_STATES = frozenset({
        PaymentState.SUCCEEDED,
        PaymentState.FAILED_RECOVERABLE,
        PaymentState.FAILED_FATAL,
    })

    def __init__(self) -> None:
        self._current_state = PaymentState.IDLE
        self._history: list[StateEntry] = [
            StateEntry(state=PaymentState.IDLE, entered_at=datetime.now(timezone.utc))
        ]
        self._failure_count: int = 0

    @property
    def current_state(self) -> PaymentState:
        return self._current_state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def in_flight(self) -> bool:
        """True while an attempt is between submit and its result."""
        return self._current_state in (PaymentState.VALIDATING, PaymentState.SUBMITTING)

    def transition(self, trigger: PaymentTrigger) -> PaymentState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new payment state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state

                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))

                if t.to_state in (PaymentState.FAILED_RECOVERABLE, PaymentState.FAILED_FATAL):
                    self._failure_count += 1

                logger.debug(
                    "Payment transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[PaymentTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        """Return the full state transition history."""
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        """Check if the current attempt has reached an outcome."""
        return self._current_state in self.TERMINAL_STATES
