"""
Domain models and value objects.

Contains the payment entities: Account, Quote, Transfer, Case, Condition,
PaymentParams and PathQuery.
"""

from ilp_sender.core.domain.account import Account, LedgerConnector
from ilp_sender.core.domain.case import Case, case_uri
from ilp_sender.core.domain.condition import (
    AndCondition,
    AndFulfillment,
    Condition,
    Ed25519Sha256Condition,
    Ed25519Sha256Fulfillment,
    Fulfillment,
    PreimageSha256Condition,
    PreimageSha256Fulfillment,
    condition_to_json,
    decode_public_key,
    parse_condition,
    parse_fulfillment,
)
from ilp_sender.core.domain.payment import (
    AtomicMode,
    BasicCredentials,
    CertCredentials,
    FixedDestinationAmount,
    FixedSourceAmount,
    PathQuery,
    PaymentParams,
    UniversalMode,
)
from ilp_sender.core.domain.quote import Quote
from ilp_sender.core.domain.transfer import (
    DESTINATION_TRANSFER_MEMO_KEY,
    Credit,
    Debit,
    Transfer,
)

__all__ = [
    # Ledger resources
    "Account",
    "LedgerConnector",
    # Quote
    "Quote",
    # Transfer
    "Transfer",
    "Debit",
    "Credit",
    "DESTINATION_TRANSFER_MEMO_KEY",
    # Case
    "Case",
    "case_uri",
    # Conditions
    "Condition",
    "Fulfillment",
    "PreimageSha256Condition",
    "Ed25519Sha256Condition",
    "AndCondition",
    "PreimageSha256Fulfillment",
    "Ed25519Sha256Fulfillment",
    "AndFulfillment",
    "parse_condition",
    "parse_fulfillment",
    "condition_to_json",
    "decode_public_key",
    # Request parameters
    "PathQuery",
    "PaymentParams",
    "FixedSourceAmount",
    "FixedDestinationAmount",
    "BasicCredentials",
    "CertCredentials",
    "UniversalMode",
    "AtomicMode",
]
