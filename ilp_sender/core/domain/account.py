"""
Account / LedgerConnector — read-only ресурсы ledger

Account разрешается по URI (GET <account>), LedgerConnector является элементом
списка GET <ledger>/connectors. Core только читает эти ресурсы.
"""

from pydantic import BaseModel, Field


class Account(BaseModel):
    """Аккаунт на ledger."""

    id: str | None = Field(None, description="URI аккаунта")
    name: str = Field(..., min_length=1, description="Имя аккаунта (username для basic-auth)")
    ledger: str = Field(..., min_length=1, description="URI ledger, которому принадлежит аккаунт")

    model_config = {"frozen": True, "extra": "ignore"}


class LedgerConnector(BaseModel):
    """Коннектор, зарегистрированный на ledger."""

    connector: str = Field(..., min_length=1, description="URI коннектора")
    name: str | None = None

    model_config = {"frozen": True, "extra": "ignore"}
