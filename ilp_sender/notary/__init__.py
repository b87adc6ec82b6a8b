"""Notary — координация atomic mode через нотариуса."""

from .coordinator import NotaryCoordinator

__all__ = ["NotaryCoordinator"]
