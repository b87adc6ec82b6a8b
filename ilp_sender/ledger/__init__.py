"""Ledger — доступ к ledger REST ресурсам (аккаунты, коннекторы, transfers)."""

from .gateway import LedgerGateway, TlsClientFactory, build_tls_client

__all__ = [
    "LedgerGateway",
    "TlsClientFactory",
    "build_tls_client",
]
