"""Shared fixtures for the QuorumVault test-suite."""

from __future__ import annotations

import pytest

from quorumvault.dispatch import InMemoryPool
from quorumvault.engine import AuthorizationEngine
from quorumvault.events import EventLog

# Digit-only addresses are their own EIP-55 checksum form.
OWNER_A = "0x" + "1" * 40
OWNER_B = "0x" + "2" * 40
OWNER_C = "0x" + "3" * 40
STRANGER = "0x" + "4" * 40
RECIPIENT = "0x" + "9" * 40

# Well-known development key (Hardhat account #0); never holds real funds.
DEV_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@pytest.fixture
def pool() -> InMemoryPool:
    """Pool holding 100 units."""
    return InMemoryPool(initial_balance=100)


@pytest.fixture
def events() -> EventLog:
    return EventLog()


@pytest.fixture
def engine(pool: InMemoryPool, events: EventLog) -> AuthorizationEngine:
    """2-of-3 engine over owners A, B, C."""
    return AuthorizationEngine([OWNER_A, OWNER_B, OWNER_C], 2, dispatcher=pool, sink=events)
