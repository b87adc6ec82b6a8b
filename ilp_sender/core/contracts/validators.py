"""
JSON Schema Contract Validators

Модуль для валидации wire-ресурсов, которые core читает и пишет:
- account.json (GET <account>)
- connectors.json (GET <ledger>/connectors)
- quote.json (GET <connector>/quote)
- case.json (POST <notary>/cases)
- transfer.json (PUT <transfer id>, только полностью собранный transfer)
- transfer_state.json (ответ ledger на submission)

Использует библиотеку jsonschema (Draft 2020-12).
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы лежат в каталоге schema/ рядом с этим модулем.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'transfer')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема не проходит meta-validation
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """
        Raises:
            jsonschema.ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Any) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Any):
        return self.validator.iter_errors(data)


class AccountValidator(ContractValidator):
    def __init__(self):
        super().__init__("account")


class ConnectorListValidator(ContractValidator):
    def __init__(self):
        super().__init__("connectors")


class QuoteValidator(ContractValidator):
    def __init__(self):
        super().__init__("quote")


class CaseValidator(ContractValidator):
    def __init__(self):
        super().__init__("case")


class TransferValidator(ContractValidator):
    """Transfer, готовый к отправке: есть execution_condition и expires_at."""

    def __init__(self):
        super().__init__("transfer")


class TransferStateValidator(ContractValidator):
    def __init__(self):
        super().__init__("transfer_state")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_account(data: Any) -> None:
    AccountValidator().validate(data)


def validate_connectors(data: Any) -> None:
    ConnectorListValidator().validate(data)


def validate_quote(data: Any) -> None:
    QuoteValidator().validate(data)


def validate_case(data: Any) -> None:
    CaseValidator().validate(data)


def validate_transfer(data: Any) -> None:
    TransferValidator().validate(data)


def validate_transfer_state(data: Any) -> None:
    TransferStateValidator().validate(data)
