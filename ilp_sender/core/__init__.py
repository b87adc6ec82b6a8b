"""
Core domain models, wire contracts, and condition primitives.

This module contains the building blocks that are independent of the
network layer (ledgers, connectors, notaries).
"""
