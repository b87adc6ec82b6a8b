"""Payment State Machine — явное состояние исполнения платежа.

Стадии:
QUOTING → ASSEMBLING → (CASED, только atomic) → CONDITIONING → SUBMITTING → SUBMITTED
Из любой нетерминальной стадии возможен переход в FAILED.

PaymentState — immutable значение, которое передаётся от стадии к стадии.
Каждая стадия возвращает новое состояние; порядок стадий проверяется
таблицей ALLOWED_TRANSITIONS, а не неявным порядком вызовов.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from ilp_sender.core.domain.payment import PaymentParams
from ilp_sender.core.domain.quote import Quote
from ilp_sender.core.domain.transfer import Transfer


class PaymentStage(str, Enum):
    """Стадия исполнения платежа."""

    QUOTING = "QUOTING"
    ASSEMBLING = "ASSEMBLING"
    CASED = "CASED"
    CONDITIONING = "CONDITIONING"
    SUBMITTING = "SUBMITTING"
    SUBMITTED = "SUBMITTED"
    FAILED = "FAILED"


ALLOWED_TRANSITIONS: dict[PaymentStage, frozenset[PaymentStage]] = {
    PaymentStage.QUOTING: frozenset({PaymentStage.ASSEMBLING, PaymentStage.FAILED}),
    PaymentStage.ASSEMBLING: frozenset(
        {PaymentStage.CASED, PaymentStage.CONDITIONING, PaymentStage.FAILED}
    ),
    PaymentStage.CASED: frozenset({PaymentStage.CONDITIONING, PaymentStage.FAILED}),
    PaymentStage.CONDITIONING: frozenset({PaymentStage.SUBMITTING, PaymentStage.FAILED}),
    PaymentStage.SUBMITTING: frozenset({PaymentStage.SUBMITTED, PaymentStage.FAILED}),
    PaymentStage.SUBMITTED: frozenset(),
    PaymentStage.FAILED: frozenset(),
}


@dataclass(frozen=True)
class PaymentState:
    """Состояние одного платежа."""

    stage: PaymentStage
    params: PaymentParams
    quote: Quote | None = None
    transfer: Transfer | None = None
    case_id: str | None = None

    # Диагностика
    failed_stage: PaymentStage | None = None
    failure_reason: str = ""

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.stage]

    def advance(self, stage: PaymentStage, **updates: Any) -> "PaymentState":
        """
        Переход в следующую стадию.

        Raises:
            RuntimeError: переход не разрешён таблицей ALLOWED_TRANSITIONS
        """
        if stage not in ALLOWED_TRANSITIONS[self.stage]:
            raise RuntimeError(f"Illegal payment transition: {self.stage.value} → {stage.value}")
        return replace(self, stage=stage, **updates)

    def update(self, **updates: Any) -> "PaymentState":
        """Новые данные в пределах текущей стадии."""
        return replace(self, **updates)

    def fail(self, reason: str) -> "PaymentState":
        return self.advance(PaymentStage.FAILED, failed_stage=self.stage, failure_reason=reason)
