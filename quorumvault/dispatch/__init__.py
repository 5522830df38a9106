"""Value-transfer collaborators (in-memory pool, on-chain dispatcher)."""

from __future__ import annotations

from .base import Dispatcher, DispatchResult  # noqa: F401
from .pool import InMemoryPool  # noqa: F401
from .web3_dispatcher import Web3Dispatcher  # noqa: F401

__all__ = [
    "Dispatcher",
    "DispatchResult",
    "InMemoryPool",
    "Web3Dispatcher",
]
