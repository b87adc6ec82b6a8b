"""Конфигурация sender (frozen dataclasses с дефолтами)."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AssemblerConfig:
    """Конфигурация TransferAssembler.

    min_message_window_sec — минимальный запас между deadline transfer
    и deadline зависимого от него downstream transfer.
    """

    min_message_window_sec: float = 1.0


@dataclass(frozen=True)
class SenderConfig:
    """Конфигурация публичных entry points."""

    http_timeout_sec: float = 10.0
    assembler: AssemblerConfig = field(default_factory=AssemblerConfig)
