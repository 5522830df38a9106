"""Dispatcher capability used by the engine to move value and invoke calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from quorumvault.types import Address


@dataclass(frozen=True)
class DispatchResult:
    """Outcome reported by a dispatcher for one ``send`` call."""

    success: bool
    reason: Optional[str] = None
    return_data: bytes = b""
    tx_hash: Optional[str] = None

    @classmethod
    def ok(cls, return_data: bytes = b"", tx_hash: Optional[str] = None) -> "DispatchResult":
        return cls(success=True, return_data=return_data, tx_hash=tx_hash)

    @classmethod
    def failed(cls, reason: str) -> "DispatchResult":
        return cls(success=False, reason=reason)


class Dispatcher(Protocol):
    """Protocol that any value-transfer collaborator must implement."""

    def send(self, target: Address, value: int, payload: bytes) -> DispatchResult:  # pragma: no cover
        """Transfer *value* from the pool to *target* and invoke *payload* there.

        Implementations **must not** let the pool balance go negative; an
        insufficient balance is reported as a failed result. Raising is
        allowed for unexpected conditions, the engine treats it as failure.
        """

    def receive(self, sender: Address, amount: int) -> int:  # pragma: no cover
        """Account for *amount* arriving from *sender*; return the new pool balance."""

    def balance(self) -> int:  # pragma: no cover
        """Return the current pool balance."""
