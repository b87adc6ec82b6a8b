"""
Contract Validation Module

Валидация wire-ресурсов ledger/connector/notary по JSON Schema контрактам.
"""

from .validators import (
    AccountValidator,
    CaseValidator,
    ConnectorListValidator,
    ContractValidator,
    QuoteValidator,
    SchemaLoader,
    TransferStateValidator,
    TransferValidator,
    validate_account,
    validate_case,
    validate_connectors,
    validate_quote,
    validate_transfer,
    validate_transfer_state,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "AccountValidator",
    "ConnectorListValidator",
    "QuoteValidator",
    "CaseValidator",
    "TransferValidator",
    "TransferStateValidator",
    # Functions
    "validate_account",
    "validate_connectors",
    "validate_quote",
    "validate_case",
    "validate_transfer",
    "validate_transfer_state",
]
