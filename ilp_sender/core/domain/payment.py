"""
PaymentParams / PathQuery — параметры запроса на платёж

Immutable Pydantic модели. Все правила "ровно одно из A или B" выражены
tagged-вариантами и проверяются один раз на входе:
- amount: FixedSourceAmount | FixedDestinationAmount
- credentials: BasicCredentials | CertCredentials
- coordination: UniversalMode | AtomicMode

Плоские mapping-параметры разбираются через from_params(); любая ошибка
разбора превращается в ilp_sender.errors.ValidationError со stage
VALIDATING до первого сетевого вызова.
"""

from decimal import Decimal
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ilp_sender.errors import VALIDATION_STAGE, ValidationError

from .condition import Condition, decode_public_key
from .units import format_amount


# =============================================================================
# AMOUNT VARIANTS
# =============================================================================


class FixedSourceAmount(BaseModel):
    """Фиксирована сумма списания у отправителя."""

    kind: Literal["source"] = "source"
    source_amount: Decimal = Field(..., gt=0)

    model_config = {"frozen": True}


class FixedDestinationAmount(BaseModel):
    """Фиксирована сумма зачисления получателю."""

    kind: Literal["destination"] = "destination"
    destination_amount: Decimal = Field(..., gt=0)

    model_config = {"frozen": True}


Amount = Annotated[Union[FixedSourceAmount, FixedDestinationAmount], Field(discriminator="kind")]


# =============================================================================
# CREDENTIAL VARIANTS
# =============================================================================


class BasicCredentials(BaseModel):
    """
    Basic-auth. username по умолчанию берётся из имени source account
    (разрешается на стадии SUBMITTING).
    """

    kind: Literal["basic"] = "basic"
    password: str = Field(..., min_length=1)
    username: str | None = None

    model_config = {"frozen": True}


class CertCredentials(BaseModel):
    """Client-certificate auth: пути к PEM файлам ключа и сертификата."""

    kind: Literal["cert"] = "cert"
    key: str = Field(..., min_length=1)
    cert: str = Field(..., min_length=1)

    model_config = {"frozen": True}


Credentials = Annotated[Union[BasicCredentials, CertCredentials], Field(discriminator="kind")]


# =============================================================================
# COORDINATION VARIANTS
# =============================================================================


class UniversalMode(BaseModel):
    """Координация без нотариуса: цепочка исполняется по receipt."""

    kind: Literal["universal"] = "universal"

    model_config = {"frozen": True}


class AtomicMode(BaseModel):
    """Координация через нотариуса: единый вердикт commit/cancel."""

    kind: Literal["atomic"] = "atomic"
    notary: str = Field(..., min_length=1, description="URI нотариуса")
    notary_public_key: str = Field(..., description="Публичный ключ нотариуса (base64 Ed25519)")
    case_id: str | None = Field(None, min_length=1, description="Заранее выбранный case id")

    model_config = {"frozen": True}

    @field_validator("notary_public_key")
    @classmethod
    def validate_notary_public_key(cls, v: str) -> str:
        decode_public_key(v)
        return v


Coordination = Annotated[Union[UniversalMode, AtomicMode], Field(discriminator="kind")]


# =============================================================================
# REQUEST MODELS
# =============================================================================


def _invalid(message: str) -> ValidationError:
    return ValidationError(message, stage=VALIDATION_STAGE)


def _validated(model_cls, data: dict[str, Any]):
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise _invalid(f"Invalid {model_cls.__name__}: {e}") from e


class PathQuery(BaseModel):
    """Запрос на поиск пути."""

    source_account: str = Field(..., min_length=1)
    destination_account: str = Field(..., min_length=1)
    amount: Amount

    model_config = {"frozen": True}

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "PathQuery":
        """
        Разбор плоских параметров.

        Ровно одно из source_amount / destination_amount должно быть задано.

        Raises:
            ValidationError: при отсутствии/конфликте параметров
        """
        source_amount = params.get("source_amount")
        destination_amount = params.get("destination_amount")
        if (source_amount is None) == (destination_amount is None):
            raise _invalid(
                "Exactly one of source_amount or destination_amount must be provided"
            )

        if source_amount is not None:
            amount: dict[str, Any] = {"kind": "source", "source_amount": source_amount}
        else:
            amount = {"kind": "destination", "destination_amount": destination_amount}

        return _validated(
            cls,
            {
                "source_account": params.get("source_account"),
                "destination_account": params.get("destination_account"),
                "amount": amount,
            },
        )

    def to_query_params(self) -> dict[str, str]:
        """Query-параметры запроса котировки у коннектора."""
        query = {
            "source_account": self.source_account,
            "destination_account": self.destination_account,
        }
        if isinstance(self.amount, FixedSourceAmount):
            query["source_amount"] = format_amount(self.amount.source_amount)
        else:
            query["destination_amount"] = format_amount(self.amount.destination_amount)
        return query


# Плоские ключи, которые понимает PaymentParams.from_params
PAYMENT_PARAM_KEYS = frozenset(
    {
        "source_account",
        "destination_account",
        "source_password",
        "source_username",
        "source_key",
        "source_cert",
        "ca",
        "notary",
        "notary_public_key",
        "case_id",
        "receipt_condition",
        "execution_condition",
        "cancellation_condition",
        "source_memo",
        "destination_memo",
        "additional_info",
    }
)


class PaymentParams(BaseModel):
    """
    Параметры исполнения платежа.

    Инварианты:
    - режим определяется вариантом coordination и фиксирован для всей цепочки
    - receipt_condition обязателен (optimistic mode не поддерживается)
    - cancellation_condition допустим только в atomic mode
    """

    source_account: str = Field(..., min_length=1)
    destination_account: str = Field(..., min_length=1)

    credentials: Credentials
    ca: str | None = Field(None, description="Путь к custom CA bundle (PEM)")

    coordination: Coordination = Field(default_factory=UniversalMode)

    receipt_condition: Condition
    execution_condition: Condition | None = None
    cancellation_condition: Condition | None = None

    source_memo: dict[str, Any] | None = None
    destination_memo: dict[str, Any] | None = None
    additional_info: dict[str, Any] | None = None

    model_config = {"frozen": True, "extra": "forbid"}

    @model_validator(mode="after")
    def validate_cancellation_only_atomic(self) -> "PaymentParams":
        if self.cancellation_condition is not None and not self.is_atomic:
            raise ValueError("cancellation_condition is only allowed in atomic mode")
        return self

    @property
    def is_atomic(self) -> bool:
        return isinstance(self.coordination, AtomicMode)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "PaymentParams":
        """
        Разбор плоских параметров (source_password / source_key+source_cert,
        notary / notary_public_key / case_id и т.д.).

        Raises:
            ValidationError: неизвестный ключ, отсутствующий или конфликтующий параметр
        """
        unknown = sorted(set(params) - PAYMENT_PARAM_KEYS)
        if unknown:
            raise _invalid(f"Unknown payment parameter(s): {', '.join(unknown)}")

        if params.get("notary"):
            if not params.get("notary_public_key"):
                raise _invalid("Missing required parameter: notary_public_key")
            coordination: dict[str, Any] = {
                "kind": "atomic",
                "notary": params["notary"],
                "notary_public_key": params["notary_public_key"],
                "case_id": params.get("case_id"),
            }
        else:
            if params.get("case_id") or params.get("notary_public_key"):
                raise _invalid("case_id and notary_public_key require a notary")
            coordination = {"kind": "universal"}

        if not params.get("receipt_condition"):
            raise _invalid("Missing required parameter: receipt_condition")

        has_password = params.get("source_password") is not None
        has_key = params.get("source_key") is not None
        has_cert = params.get("source_cert") is not None
        if has_key != has_cert:
            raise _invalid("source_key and source_cert must be provided together")
        if has_password == has_key:
            raise _invalid(
                "Exactly one of source_password or source_key/source_cert must be provided"
            )
        if has_password:
            credentials: dict[str, Any] = {
                "kind": "basic",
                "password": params["source_password"],
                "username": params.get("source_username"),
            }
        else:
            credentials = {
                "kind": "cert",
                "key": params["source_key"],
                "cert": params["source_cert"],
            }

        return _validated(
            cls,
            {
                "source_account": params.get("source_account"),
                "destination_account": params.get("destination_account"),
                "credentials": credentials,
                "ca": params.get("ca"),
                "coordination": coordination,
                "receipt_condition": params["receipt_condition"],
                "execution_condition": params.get("execution_condition"),
                "cancellation_condition": params.get("cancellation_condition"),
                "source_memo": params.get("source_memo"),
                "destination_memo": params.get("destination_memo"),
                "additional_info": params.get("additional_info"),
            },
        )
