from courtside.payment.orchestrator import PaymentOrchestrator, PaymentOutcome
from courtside.payment.pricing import PriceCalculator, VoucherNotApplicableError
from courtside.payment.state_machine import (
    PaymentState,
    PaymentStateMachine,
    PaymentTrigger,
)
from courtside.payment.validation import FailureReason, PaymentValidator

__all__ = [
    "PaymentOrchestrator",
    "PaymentOutcome",
    "PaymentStateMachine",
    "PaymentState",
    "PaymentTrigger",
    "PaymentValidator",
    "FailureReason",
    "PriceCalculator",
    "VoucherNotApplicableError",
]
