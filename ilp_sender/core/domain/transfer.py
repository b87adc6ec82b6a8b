"""
Transfer — центральная сущность платежа

Immutable Pydantic модель. Жизненный цикл выражается через model_copy:
assembled → (cased) → conditioned → submitted (state от ledger).

Первый credit source transfer несёт memo {"destination_transfer": {...}}:
plain JSON payload следующего hop. Core не владеет этим объектом и не
интерпретирует его, кроме установки memo/conditions/expiry.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .condition import Condition
from .units import FixedPointDecimal


DESTINATION_TRANSFER_MEMO_KEY = "destination_transfer"


class Debit(BaseModel):
    account: str = Field(..., min_length=1)
    amount: FixedPointDecimal = Field(..., gt=0)
    memo: dict[str, Any] | None = None

    model_config = {"frozen": True}


class Credit(BaseModel):
    account: str = Field(..., min_length=1)
    amount: FixedPointDecimal = Field(..., gt=0)
    memo: dict[str, Any] | None = None

    model_config = {"frozen": True}


class Transfer(BaseModel):
    """
    Условный transfer на одном ledger.

    cancellation_condition присутствует только в atomic mode: его наличие служит
    сигналом для downstream ledger о режиме координации.
    """

    id: str = Field(..., min_length=1, description="URI transfer (<ledger>/transfers/<uuid>)")
    ledger: str = Field(..., min_length=1)
    debits: list[Debit] = Field(..., min_length=1)
    credits: list[Credit] = Field(..., min_length=1)

    execution_condition: Condition | None = None
    cancellation_condition: Condition | None = None
    expires_at: datetime | None = None
    case_id: str | None = None

    # Внутреннее поле: не отправляется на ledger
    expiry_duration: FixedPointDecimal | None = Field(
        None, gt=0, description="Время жизни (секунды)"
    )

    state: str | None = Field(None, description="Статус, сообщённый ledger")
    additional_info: dict[str, Any] | None = None

    model_config = {"frozen": True}

    def to_payload(self) -> dict[str, Any]:
        """JSON payload со всеми полями (включая expiry_duration)."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_wire(self) -> dict[str, Any]:
        """Тело запроса к ledger (без внутренних полей)."""
        return self.model_dump(mode="json", exclude_none=True, exclude={"expiry_duration"})
