"""
Conditions — derivation и проверка execution/cancellation conditions

Чистые детерминированные функции: одинаковые входы всегда дают одинаковый
condition. Поэтому вызывающий код может передать свой condition заранее,
и он считается авторитетным (не пересчитывается).

Universal mode:
- execution condition = receipt condition

Atomic mode (есть case):
- execution condition = AND(attestation нотариуса "executed", receipt condition)
- cancellation condition = attestation нотариуса "rejected"

Attestation нотариуса: ed25519-sha256 condition над каноническим JSON
{"id": <case uri>, "state": <state>}. Сообщения для "executed" и "rejected"
различаются, поэтому ни один witness не может выполнить оба условия.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Derivation детерминирован (canonical JSON, sorted keys)
2. Execution и cancellation взаимоисключающие
3. В atomic mode голый receipt не выполняет execution condition
"""

import base64
import binascii
import hashlib
import json
from typing import Any, Final

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from ilp_sender.core.domain.case import case_uri
from ilp_sender.core.domain.condition import (
    AndCondition,
    AndFulfillment,
    Ed25519Sha256Condition,
    Ed25519Sha256Fulfillment,
    PreimageSha256Condition,
    PreimageSha256Fulfillment,
    condition_to_json,
    decode_public_key,
    parse_condition,
    parse_fulfillment,
)
from ilp_sender.errors import ValidationError


# =============================================================================
# CONSTANTS
# =============================================================================

NOTARY_STATE_EXECUTED: Final[str] = "executed"
NOTARY_STATE_REJECTED: Final[str] = "rejected"


# =============================================================================
# CANONICAL BYTES
# =============================================================================


def canonical_json(obj: Any) -> bytes:
    """
    Канонические JSON байты для хеширования/подписи.

    - keys sorted
    - без лишних пробелов
    - UTF-8
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )


def hash_json(obj: Any) -> str:
    """SHA-256 (hex) от канонического JSON."""
    return hashlib.sha256(canonical_json(obj)).hexdigest()


def notary_message(case: str, state: str) -> bytes:
    """
    Сообщение, которое нотариус подписывает для вердикта по case.

    Args:
        case: URI case
        state: NOTARY_STATE_EXECUTED или NOTARY_STATE_REJECTED
    """
    return canonical_json({"id": case, "state": state})


def condition_fingerprint(condition: Any) -> str:
    """Отпечаток condition: SHA-256 от его канонического JSON."""
    return hash_json(condition_to_json(parse_condition(condition)))


# =============================================================================
# CONDITION BUILDERS
# =============================================================================


def preimage_condition(preimage: bytes) -> PreimageSha256Condition:
    """Receipt condition на знание preimage."""
    return PreimageSha256Condition(digest=hashlib.sha256(preimage).hexdigest())


def notary_attestation_condition(
    notary: str, notary_public_key: str, case_id: str, state: str
) -> Ed25519Sha256Condition:
    """Condition, выполняемый только подписью нотариуса над вердиктом `state`."""
    message = notary_message(case_uri(notary, case_id), state)
    return Ed25519Sha256Condition(
        signer=notary,
        public_key=notary_public_key,
        message_hash=hashlib.sha256(message).hexdigest(),
    )


def _require_case_inputs(case_id: str | None, notary: str | None, notary_public_key: str | None):
    if not notary or not notary_public_key:
        raise ValidationError("notary and notary_public_key are required when a case is used")
    if not case_id:
        raise ValidationError("case_id is required for notary conditions")


def derive_execution_condition(
    receipt_condition: Any,
    case_id: str | None = None,
    notary: str | None = None,
    notary_public_key: str | None = None,
):
    """
    Execution condition для transfer.

    Args:
        receipt_condition: condition, подтверждающий получение у получателя
        case_id: id case нотариуса (только atomic mode)
        notary: URI нотариуса
        notary_public_key: публичный ключ нотариуса (base64)

    Returns:
        receipt condition (universal) или AND(attestation, receipt) (atomic)

    Raises:
        ValidationError: нет receipt condition или неполные данные нотариуса
    """
    if not receipt_condition:
        raise ValidationError("Missing required parameter: receipt_condition")
    receipt = parse_condition(receipt_condition)

    if case_id is None:
        return receipt

    _require_case_inputs(case_id, notary, notary_public_key)
    return AndCondition(
        subconditions=[
            notary_attestation_condition(notary, notary_public_key, case_id, NOTARY_STATE_EXECUTED),
            receipt,
        ]
    )


def derive_cancellation_condition(
    receipt_condition: Any,
    case_id: str | None = None,
    notary: str | None = None,
    notary_public_key: str | None = None,
) -> Ed25519Sha256Condition:
    """
    Cancellation condition (только atomic mode).

    Принимает те же входы, что и derive_execution_condition; receipt condition
    на результат не влияет, но обязателен для симметрии контракта.

    Raises:
        ValidationError: нет case/нотариуса/ключа
    """
    if not receipt_condition:
        raise ValidationError("Missing required parameter: receipt_condition")
    _require_case_inputs(case_id, notary, notary_public_key)
    return notary_attestation_condition(notary, notary_public_key, case_id, NOTARY_STATE_REJECTED)


# =============================================================================
# FULFILLMENT
# =============================================================================


def sign_notary_state(
    private_key: Ed25519PrivateKey, notary: str, case_id: str, state: str
) -> Ed25519Sha256Fulfillment:
    """Fulfillment нотариуса для вердикта `state` по case."""
    message = notary_message(case_uri(notary, case_id), state)
    return Ed25519Sha256Fulfillment(
        message=message.decode("utf-8"),
        signature=base64.b64encode(private_key.sign(message)).decode("ascii"),
    )


def _verify_ed25519(condition: Ed25519Sha256Condition, fulfillment: Ed25519Sha256Fulfillment) -> bool:
    message = fulfillment.message.encode("utf-8")
    if hashlib.sha256(message).hexdigest() != condition.message_hash:
        return False
    try:
        signature = base64.b64decode(fulfillment.signature, validate=True)
    except (binascii.Error, ValueError):
        return False
    public_key = Ed25519PublicKey.from_public_bytes(decode_public_key(condition.public_key))
    try:
        public_key.verify(signature, message)
    except InvalidSignature:
        return False
    return True


def validate_fulfillment(condition: Any, fulfillment: Any) -> bool:
    """
    Проверка, что fulfillment выполняет condition.

    Returns:
        True если fulfillment того же типа и все проверки прошли
    """
    condition = parse_condition(condition)
    fulfillment = parse_fulfillment(fulfillment)

    if isinstance(condition, PreimageSha256Condition) and isinstance(
        fulfillment, PreimageSha256Fulfillment
    ):
        digest = hashlib.sha256(bytes.fromhex(fulfillment.preimage)).hexdigest()
        return digest == condition.digest

    if isinstance(condition, Ed25519Sha256Condition) and isinstance(
        fulfillment, Ed25519Sha256Fulfillment
    ):
        return _verify_ed25519(condition, fulfillment)

    if isinstance(condition, AndCondition) and isinstance(fulfillment, AndFulfillment):
        if len(condition.subconditions) != len(fulfillment.subfulfillments):
            return False
        return all(
            validate_fulfillment(sub_condition, sub_fulfillment)
            for sub_condition, sub_fulfillment in zip(condition.subconditions, fulfillment.subfulfillments)
        )

    # Тип fulfillment не совпадает с типом condition
    return False
