"""Общие fixtures: фейковая сеть, ключи нотариуса, receipt condition."""

import base64

import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from ilp_sender.core.crypto import preimage_condition
from tests.fakes import (
    CONNECTOR,
    SOURCE_ACCOUNT,
    SOURCE_LEDGER,
    FakeNetwork,
    quote_body,
)


@pytest.fixture
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def ledger_network(network: FakeNetwork) -> FakeNetwork:
    """Source ledger с одним коннектором и успешной submission."""
    network.add("GET", SOURCE_ACCOUNT, json={"id": SOURCE_ACCOUNT, "name": "alice", "ledger": SOURCE_LEDGER})
    network.add("GET", f"{SOURCE_LEDGER}/connectors", json=[{"connector": CONNECTOR}])
    network.add("GET", f"{CONNECTOR}/quote", json=quote_body())
    network.add_prefix(
        "PUT",
        f"{SOURCE_LEDGER}/transfers/",
        lambda request: httpx.Response(200, json={"id": str(request.url), "state": "prepared"}),
    )
    return network


@pytest.fixture
def notary_private_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture
def notary_public_key(notary_private_key: Ed25519PrivateKey) -> str:
    raw = notary_private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return base64.b64encode(raw).decode("ascii")


@pytest.fixture
def receipt_preimage() -> bytes:
    return b"receipt-secret"


@pytest.fixture
def receipt_condition(receipt_preimage: bytes):
    return preimage_condition(receipt_preimage)
