"""
Errors — таксономия ошибок исполнения платежа

Каждая ошибка поднимается там, где она обнаружена, и пробрасывается
без изменений до вызывающего кода. PaymentExecutor помечает исключение
стадией (`stage`), на которой оно произошло; ошибки разбора параметров
помечены VALIDATION_STAGE в месте возникновения.
"""

from typing import Any


# Stage ошибок разбора параметров (до создания PaymentState)
VALIDATION_STAGE = "VALIDATING"


class PaymentError(Exception):
    """Базовая ошибка платежа."""

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.stage = stage


class ValidationError(PaymentError):
    """Отсутствующий или конфликтующий параметр запроса (никогда не ретраится)."""


class ResolutionError(PaymentError):
    """Не удалось разрешить account → ledger или получить список коннекторов."""


class NotarizationError(PaymentError):
    """Нотариус не зарегистрировал case (фатально для atomic mode)."""


class AssemblyError(PaymentError):
    """Некорректный quote или transfer."""


class SubmissionError(PaymentError):
    """Ledger отклонил transfer."""

    def __init__(self, message: str, status_code: int, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TransportError(PaymentError):
    """Сетевая ошибка при обращении к внешней стороне."""
