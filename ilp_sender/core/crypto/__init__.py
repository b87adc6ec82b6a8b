"""
Condition primitives: canonical hashing, derivation and fulfillment checks.

Все функции детерминированы и не выполняют I/O.
"""

from ilp_sender.core.crypto.conditions import (
    NOTARY_STATE_EXECUTED,
    NOTARY_STATE_REJECTED,
    canonical_json,
    condition_fingerprint,
    derive_cancellation_condition,
    derive_execution_condition,
    hash_json,
    notary_attestation_condition,
    notary_message,
    preimage_condition,
    sign_notary_state,
    validate_fulfillment,
)

__all__ = [
    # Constants
    "NOTARY_STATE_EXECUTED",
    "NOTARY_STATE_REJECTED",
    # Canonical bytes
    "canonical_json",
    "hash_json",
    "notary_message",
    "condition_fingerprint",
    # Builders
    "preimage_condition",
    "notary_attestation_condition",
    "derive_execution_condition",
    "derive_cancellation_condition",
    # Fulfillment
    "sign_notary_state",
    "validate_fulfillment",
]
