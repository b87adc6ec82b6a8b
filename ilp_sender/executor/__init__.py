"""Executor — оркестрация исполнения платежа (state machine + stages)."""

from .payment_executor import PaymentExecutor, utc_now
from .state_machine import ALLOWED_TRANSITIONS, PaymentStage, PaymentState

__all__ = [
    "PaymentExecutor",
    "PaymentStage",
    "PaymentState",
    "ALLOWED_TRANSITIONS",
    "utc_now",
]
