"""In-process value pool used as the default dispatcher."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Tuple, Union

from quorumvault.dispatch.base import DispatchResult
from quorumvault.types import Address, canonical_identity

LOGGER = logging.getLogger(__name__)

# handler(value, payload) -> False on failure, bytes as return data, None/True on success
TargetHandler = Callable[[int, bytes], Union[bool, bytes, None]]


class InMemoryPool:
    """Hold the shared pool balance and simulate calls to targets.

    Transfers debit the pool and credit the target before the target's
    handler runs. When the handler fails the transfer is rolled back, so a
    failed ``send`` never moves value.
    """

    def __init__(self, initial_balance: int = 0) -> None:
        if initial_balance < 0:
            raise ValueError("initial_balance must be non-negative")
        self._balance = initial_balance
        self._credited: Dict[Address, int] = defaultdict(int)
        self._handlers: Dict[Address, TargetHandler] = {}
        self._lock = threading.RLock()
        self.calls: List[Tuple[Address, int, bytes]] = []

    def register_handler(self, target: Address, handler: TargetHandler) -> None:
        """Install *handler* to simulate the call made at *target*."""
        self._handlers[canonical_identity(target)] = handler

    def balance(self) -> int:
        return self._balance

    def credited(self, target: Address) -> int:
        """Return the total value transferred to *target* so far."""
        return self._credited.get(canonical_identity(target), 0)

    def receive(self, sender: Address, amount: int) -> int:
        """Credit *amount* to the pool and return the new balance."""
        if amount < 0:
            raise ValueError("Deposit amount must be non-negative")
        with self._lock:
            self._balance += amount
            LOGGER.debug("Pool received %s from %s, balance now %s", amount, sender, self._balance)
            return self._balance

    def send(self, target: Address, value: int, payload: bytes) -> DispatchResult:
        if value < 0:
            return DispatchResult.failed("negative value")
        target = canonical_identity(target)
        with self._lock:
            if value > self._balance:
                LOGGER.warning("Pool balance %s too low to send %s to %s", self._balance, value, target)
                return DispatchResult.failed(
                    f"insufficient pool balance: {self._balance} < {value}"
                )
            self._balance -= value
            self._credited[target] += value
            self.calls.append((target, value, payload))

        handler = self._handlers.get(target)
        outcome: Union[bool, bytes, None] = None
        error: Optional[str] = None
        if handler is not None:
            try:
                outcome = handler(value, payload)
            except Exception as exc:  # target call reverted
                error = f"call to {target} raised {type(exc).__name__}: {exc}"
            else:
                if outcome is False:
                    error = f"call to {target} reported failure"

        if error is not None:
            with self._lock:
                self._balance += value
                self._credited[target] -= value
            LOGGER.warning("Rolled back transfer of %s to %s: %s", value, target, error)
            return DispatchResult.failed(error)

        return_data = outcome if isinstance(outcome, (bytes, bytearray)) else b""
        return DispatchResult.ok(return_data=bytes(return_data))
