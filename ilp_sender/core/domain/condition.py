"""
Condition — криптографические условия и их fulfillment

Immutable Pydantic модели. Condition является tagged union по полю `type`:
- preimage-sha256: выполняется предъявлением preimage, sha256 которого равен digest
- ed25519-sha256: выполняется подписью Ed25519 над сообщением с заданным sha256
- and: выполняется только если выполнены все subconditions (в том же порядке)

Derivation и проверка fulfillment живут в ilp_sender.core.crypto.conditions.
"""

import base64
import binascii
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator


# =============================================================================
# CONSTANTS
# =============================================================================

HEX_SHA256_PATTERN = "^[0-9a-f]{64}$"

ED25519_PUBLIC_KEY_BYTES = 32


def decode_public_key(value: str) -> bytes:
    """
    Декодирование base64 публичного ключа Ed25519.

    Raises:
        ValueError: если строка не base64 или длина ключа != 32 байт
    """
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"public key is not valid base64: {e}")
    if len(raw) != ED25519_PUBLIC_KEY_BYTES:
        raise ValueError(
            f"Ed25519 public key must be {ED25519_PUBLIC_KEY_BYTES} bytes, got {len(raw)}"
        )
    return raw


# =============================================================================
# CONDITIONS
# =============================================================================


class PreimageSha256Condition(BaseModel):
    """Условие на знание preimage (hex) с заданным SHA-256 digest."""

    type: Literal["preimage-sha256"] = "preimage-sha256"
    digest: str = Field(..., pattern=HEX_SHA256_PATTERN, description="SHA-256 от preimage (hex)")

    model_config = {"frozen": True}


class Ed25519Sha256Condition(BaseModel):
    """Условие на подпись Ed25519 над сообщением с заданным SHA-256."""

    type: Literal["ed25519-sha256"] = "ed25519-sha256"
    public_key: str = Field(..., description="Публичный ключ подписанта (base64)")
    message_hash: str = Field(..., pattern=HEX_SHA256_PATTERN, description="SHA-256 сообщения (hex)")
    signer: str | None = Field(None, description="URI подписанта (например, нотариуса)")

    model_config = {"frozen": True}

    @field_validator("public_key")
    @classmethod
    def validate_public_key(cls, v: str) -> str:
        decode_public_key(v)
        return v


class AndCondition(BaseModel):
    """Конъюнкция условий."""

    type: Literal["and"] = "and"
    subconditions: list["Condition"] = Field(..., min_length=1)

    model_config = {"frozen": True}


Condition = Annotated[
    Union[PreimageSha256Condition, Ed25519Sha256Condition, AndCondition],
    Field(discriminator="type"),
]


# =============================================================================
# FULFILLMENTS
# =============================================================================


class PreimageSha256Fulfillment(BaseModel):
    type: Literal["preimage-sha256"] = "preimage-sha256"
    preimage: str = Field(..., pattern="^([0-9a-f]{2})*$", description="Preimage (hex)")

    model_config = {"frozen": True}


class Ed25519Sha256Fulfillment(BaseModel):
    type: Literal["ed25519-sha256"] = "ed25519-sha256"
    message: str = Field(..., description="Подписанное сообщение (UTF-8)")
    signature: str = Field(..., description="Подпись Ed25519 (base64)")

    model_config = {"frozen": True}


class AndFulfillment(BaseModel):
    type: Literal["and"] = "and"
    subfulfillments: list["Fulfillment"] = Field(..., min_length=1)

    model_config = {"frozen": True}


Fulfillment = Annotated[
    Union[PreimageSha256Fulfillment, Ed25519Sha256Fulfillment, AndFulfillment],
    Field(discriminator="type"),
]


AndCondition.model_rebuild()
AndFulfillment.model_rebuild()

_CONDITION_ADAPTER: TypeAdapter = TypeAdapter(Condition)
_FULFILLMENT_ADAPTER: TypeAdapter = TypeAdapter(Fulfillment)


def parse_condition(data: Any) -> Any:
    """Разбор condition из dict (или возврат уже готовой модели)."""
    return _CONDITION_ADAPTER.validate_python(data)


def parse_fulfillment(data: Any) -> Any:
    """Разбор fulfillment из dict (или возврат уже готовой модели)."""
    return _FULFILLMENT_ADAPTER.validate_python(data)


def condition_to_json(condition: Any) -> dict[str, Any]:
    """Wire-представление condition (JSON-совместимый dict)."""
    return _CONDITION_ADAPTER.dump_python(condition, mode="json", exclude_none=True)
