"""
Test suite for ilp-sender

Contains:
- tests/unit/   : Unit tests for individual components and the public API
- tests/fakes.py: In-memory ledger/connector/notary network (httpx.MockTransport)
"""
