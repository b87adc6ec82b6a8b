"""Assembly — сборка transfers по котировке."""

from .transfers import TransferAssembler, get_destination_transfer, new_transfer_id

__all__ = [
    "TransferAssembler",
    "get_destination_transfer",
    "new_transfer_id",
]
