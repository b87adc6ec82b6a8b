"""
ilp-sender — клиентский оркестратор условных платежей через несколько ledger.

Entry points:
- send_payment: поиск пути + исполнение
- execute_payment: исполнение по готовой котировке
- find_path: только поиск пути
"""

from ilp_sender.api import execute_payment, find_path, send_payment
from ilp_sender.config import AssemblerConfig, SenderConfig
from ilp_sender.errors import (
    AssemblyError,
    NotarizationError,
    PaymentError,
    ResolutionError,
    SubmissionError,
    TransportError,
    ValidationError,
)

__all__ = [
    # Entry points
    "send_payment",
    "execute_payment",
    "find_path",
    # Config
    "SenderConfig",
    "AssemblerConfig",
    # Errors
    "PaymentError",
    "ValidationError",
    "ResolutionError",
    "NotarizationError",
    "AssemblyError",
    "SubmissionError",
    "TransportError",
]
