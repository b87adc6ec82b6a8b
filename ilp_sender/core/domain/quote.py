"""
Quote — котировка пути от коннектора

Immutable Pydantic модель. Quote описывает двухшаговый путь:
source_account --(source_ledger)--> connector ==> destination_connector_account
--(destination_ledger)--> destination_account.

Суммы: Decimal (на wire fixed-point строки, см. units.py).
Длительности: секунды до истечения соответствующего transfer.
"""

from pydantic import BaseModel, Field

from .units import FixedPointDecimal


class Quote(BaseModel):
    """Котировка коннектора для одного пути."""

    # Участники
    connector: str = Field(..., min_length=1, description="Аккаунт коннектора на source ledger")
    source_account: str = Field(..., min_length=1, description="Аккаунт отправителя")
    destination_account: str = Field(..., min_length=1, description="Аккаунт получателя")
    destination_connector_account: str = Field(
        ..., min_length=1, description="Аккаунт коннектора на destination ledger"
    )

    # Ledgers
    source_ledger: str = Field(..., min_length=1, description="Ledger отправителя")
    destination_ledger: str = Field(..., min_length=1, description="Ledger получателя")

    # Суммы
    source_amount: FixedPointDecimal = Field(
        ..., gt=0, description="Сумма списания у отправителя"
    )
    destination_amount: FixedPointDecimal = Field(
        ..., gt=0, description="Сумма зачисления получателю"
    )

    # Время
    source_expiry_duration: FixedPointDecimal = Field(
        ..., gt=0, description="Время жизни source transfer (секунды)"
    )
    destination_expiry_duration: FixedPointDecimal = Field(
        ..., gt=0, description="Время жизни destination transfer (секунды)"
    )

    model_config = {"frozen": True}
