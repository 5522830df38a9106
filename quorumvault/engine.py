"""Quorum-gated transaction authorization engine.

A fixed set of owners proposes transactions against a shared pool. A
transaction may execute once at least ``threshold`` distinct owners have
confirmed it, and it executes at most once.

Every mutating operation runs under a single re-entrant lock, so
operations are atomic with respect to each other. ``execute`` marks the
transaction executed *before* handing it to the dispatcher: a dispatched
call that re-enters the engine (same thread, thanks to the ``RLock``) or a
racing caller on another thread both observe the mark and fail with
:class:`AlreadyExecuted`.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from quorumvault.config import Settings
from quorumvault.dispatch.base import Dispatcher, DispatchResult
from quorumvault.dispatch.pool import InMemoryPool
from quorumvault.errors import (
    AlreadyConfirmed,
    AlreadyExecuted,
    ExecutionFailed,
    NotConfirmed,
    NotOwner,
    QuorumNotMet,
    TransactionNotFound,
)
from quorumvault.events import (
    Confirmed,
    Deposited,
    EventLog,
    Executed,
    ExecutionFailure,
    NotificationSink,
    Proposed,
    Revoked,
)
from quorumvault.quorum import has_quorum, required_confirmations
from quorumvault.types import (
    Address,
    ExecutionPolicy,
    OwnerConfig,
    Transaction,
    TransactionSnapshot,
    TransactionStatus,
    canonical_identity,
    to_address,
)

LOGGER = logging.getLogger(__name__)


class AuthorizationEngine:
    """Owns the owner set, the transaction ledger and the confirmation record."""

    def __init__(
        self,
        owners: Iterable[Any],
        threshold: int,
        dispatcher: Optional[Dispatcher] = None,
        sink: Optional[NotificationSink] = None,
        policy: ExecutionPolicy = ExecutionPolicy.CONSUME,
    ) -> None:
        """Validate the owner set and threshold and start with an empty ledger.

        Args:
            owners: Owner identities (addresses). Must be non-empty, unique and
                non-null.
            threshold: Confirmations required to execute, ``1..len(owners)``.
            dispatcher: Value-transfer collaborator; defaults to an empty
                :class:`InMemoryPool`.
            sink: Receives every event; defaults to an :class:`EventLog`.
            policy: Behaviour when a dispatch fails (see
                :class:`ExecutionPolicy`).

        Raises:
            OwnersRequired, InvalidThreshold, InvalidOwner, DuplicateOwner
        """
        self.config = OwnerConfig.create(owners, threshold)
        self.dispatcher: Dispatcher = dispatcher if dispatcher is not None else InMemoryPool()
        self.sink: NotificationSink = sink if sink is not None else EventLog()
        self.policy = policy

        self._transactions: List[Transaction] = []
        # index -> owners currently confirming that transaction
        self._confirmations: Dict[int, Set[Address]] = {}
        self._sequence = 0
        self._lock = threading.RLock()

        LOGGER.info(
            "Authorization engine created: %s-of-%s, policy=%s",
            self.config.threshold,
            len(self.config.owners),
            policy.value,
        )

    @classmethod
    def from_config(cls, config: OwnerConfig, **kwargs: Any) -> "AuthorizationEngine":
        return cls(config.owners, config.threshold, **kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        dispatcher: Optional[Dispatcher] = None,
        sink: Optional[NotificationSink] = None,
    ) -> "AuthorizationEngine":
        """Build an engine from environment settings."""
        return cls.from_config(
            settings.owner_config(),
            dispatcher=dispatcher,
            sink=sink,
            policy=settings.execution_policy,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _emit(self, event_cls: type, **fields: Any) -> None:
        self._sequence += 1
        event = event_cls(sequence=self._sequence, **fields)
        # the state change is already committed; a broken sink must not hide it
        try:
            self.sink.emit(event)
        except Exception:
            LOGGER.exception("Sink %r failed to deliver %s event %s", self.sink, event.kind.value, event.sequence)

    def _require_owner(self, caller: Any) -> Address:  # noqa: ANN401
        if not self.config.is_owner(caller):
            raise NotOwner(caller)
        return to_address(caller)

    def _require_transaction(self, index: Any) -> Transaction:  # noqa: ANN401
        # Python's negative indexing must not leak into the ledger
        if isinstance(index, bool) or not isinstance(index, int):
            raise TransactionNotFound(index)
        if index < 0 or index >= len(self._transactions):
            raise TransactionNotFound(index)
        return self._transactions[index]

    def _require_pending(self, index: Any) -> Transaction:  # noqa: ANN401
        tx = self._require_transaction(index)
        if tx.executed:
            raise AlreadyExecuted(index)
        return tx

    def _record_failure(self, owner: Address, tx: Transaction, reason: str) -> None:
        tx.failure_reason = reason
        if self.policy == ExecutionPolicy.REVERT:
            tx.executed = False
        LOGGER.warning(
            "Transaction %s dispatch failed (%s); %s",
            tx.index,
            reason,
            "reopened for retry" if not tx.executed else "transaction consumed",
        )
        self._emit(ExecutionFailure, owner=owner, index=tx.index, reason=reason)

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def deposit(self, sender: Any, amount: int) -> int:  # noqa: ANN401
        """Record *amount* arriving from *sender*; return the new pool balance."""
        with self._lock:
            sender = canonical_identity(sender)
            new_balance = self.dispatcher.receive(sender, amount)
            self._emit(Deposited, sender=sender, amount=amount, new_balance=new_balance)
            return new_balance

    def propose(self, caller: Any, target: Any, value: int, payload: bytes = b"") -> int:  # noqa: ANN401
        """Append a new transaction and return its index.

        Raises:
            NotOwner: *caller* is not an owner.
        """
        with self._lock:
            owner = self._require_owner(caller)
            index = len(self._transactions)
            tx = Transaction(
                index=index,
                proposer=owner,
                target=canonical_identity(target),
                value=value,
                payload=bytes(payload),
            )
            self._transactions.append(tx)
            self._confirmations[index] = set()
            LOGGER.info("Transaction %s proposed by %s: %s to %s", index, owner, value, tx.target)
            self._emit(
                Proposed,
                owner=owner,
                index=index,
                target=tx.target,
                value=tx.value,
                payload=tx.payload,
            )
            return index

    def confirm(self, caller: Any, index: int) -> int:  # noqa: ANN401
        """Record *caller*'s confirmation; return the new confirmation count.

        Raises:
            NotOwner, TransactionNotFound, AlreadyExecuted, AlreadyConfirmed
        """
        with self._lock:
            owner = self._require_owner(caller)
            tx = self._require_pending(index)
            confirmers = self._confirmations[index]
            if owner in confirmers:
                raise AlreadyConfirmed(owner, index)
            confirmers.add(owner)
            tx.confirmation_count += 1
            LOGGER.debug(
                "Transaction %s confirmed by %s (%s/%s, %s more needed)",
                index,
                owner,
                tx.confirmation_count,
                self.config.threshold,
                required_confirmations(tx.confirmation_count, self.config.threshold),
            )
            self._emit(Confirmed, owner=owner, index=index)
            return tx.confirmation_count

    def revoke(self, caller: Any, index: int) -> int:  # noqa: ANN401
        """Withdraw *caller*'s confirmation; return the new confirmation count.

        Raises:
            NotOwner, TransactionNotFound, AlreadyExecuted, NotConfirmed
        """
        with self._lock:
            owner = self._require_owner(caller)
            tx = self._require_pending(index)
            confirmers = self._confirmations[index]
            if owner not in confirmers:
                raise NotConfirmed(owner, index)
            confirmers.discard(owner)
            tx.confirmation_count -= 1
            LOGGER.debug("Transaction %s revoked by %s (%s left)", index, owner, tx.confirmation_count)
            self._emit(Revoked, owner=owner, index=index)
            return tx.confirmation_count

    def execute(self, caller: Any, index: int) -> DispatchResult:  # noqa: ANN401
        """Dispatch a transaction that reached quorum.

        Raises:
            NotOwner, TransactionNotFound, AlreadyExecuted, QuorumNotMet
            ExecutionFailed: The dispatcher raised or reported failure. Under
                ``ExecutionPolicy.CONSUME`` the transaction stays executed.
        """
        with self._lock:
            owner = self._require_owner(caller)
            tx = self._require_pending(index)
            if not has_quorum(tx.confirmation_count, self.config.threshold):
                raise QuorumNotMet(index, tx.confirmation_count, self.config.threshold)

            # Must happen before dispatch: blocks re-entrant and racing executes
            tx.executed = True
            LOGGER.info("Executing transaction %s for %s", index, owner)

            try:
                result = self.dispatcher.send(tx.target, tx.value, tx.payload)
            except Exception as exc:
                reason = f"{type(exc).__name__}: {exc}"
                self._record_failure(owner, tx, reason)
                raise ExecutionFailed(index, reason) from exc

            if not result.success:
                reason = result.reason or "dispatch failed"
                self._record_failure(owner, tx, reason)
                raise ExecutionFailed(index, reason)

            tx.failure_reason = None
            self._emit(Executed, owner=owner, index=index)
            return result

    def confirm_and_execute(self, caller: Any, index: int) -> bool:  # noqa: ANN401
        """Confirm, then execute if the confirmation completed the quorum.

        Returns:
            True when the transaction was executed by this call.
        """
        with self._lock:
            count = self.confirm(caller, index)
            if not has_quorum(count, self.config.threshold):
                return False
            self.execute(caller, index)
            return True

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def owners(self) -> Tuple[Address, ...]:
        return self.config.owners

    @property
    def threshold(self) -> int:
        return self.config.threshold

    def is_owner(self, identity: Any) -> bool:  # noqa: ANN401
        return self.config.is_owner(identity)

    @property
    def transaction_count(self) -> int:
        with self._lock:
            return len(self._transactions)

    def get_transaction(self, index: int) -> TransactionSnapshot:
        with self._lock:
            return self._require_transaction(index).snapshot()

    def is_confirmed(self, index: int, owner: Any) -> bool:  # noqa: ANN401
        """Return whether *owner* currently confirms transaction *index*."""
        with self._lock:
            self._require_transaction(index)
            try:
                return to_address(owner) in self._confirmations[index]
            except ValueError:
                return False

    def confirmations(self, index: int) -> Tuple[Address, ...]:
        """Return the confirming owners of *index* in owner-set order."""
        with self._lock:
            self._require_transaction(index)
            confirmers = self._confirmations[index]
            return tuple(owner for owner in self.config.owners if owner in confirmers)

    def status(self, index: int) -> TransactionStatus:
        with self._lock:
            tx = self._require_transaction(index)
            if tx.executed:
                return TransactionStatus.FAILED if tx.failure_reason else TransactionStatus.EXECUTED
            if has_quorum(tx.confirmation_count, self.config.threshold):
                return TransactionStatus.READY
            return TransactionStatus.PENDING

    def transactions(self, pending_only: bool = False, executed_only: bool = False) -> List[TransactionSnapshot]:
        """Return snapshots of all transactions, optionally filtered."""
        if pending_only and executed_only:
            raise ValueError("pending_only and executed_only are mutually exclusive")
        with self._lock:
            return [
                tx.snapshot()
                for tx in self._transactions
                if not (pending_only and tx.executed) and not (executed_only and not tx.executed)
            ]

    def balance(self) -> int:
        """Return the pool balance reported by the dispatcher."""
        with self._lock:
            return self.dispatcher.balance()

    def check_invariants(self) -> None:
        """Verify the confirmation bookkeeping.

        Raises:
            RuntimeError: A transaction's count differs from its confirmer set,
                falls outside ``[0, len(owners)]``, or a confirmer is not an owner.
        """
        with self._lock:
            owner_count = len(self.config.owners)
            for tx in self._transactions:
                confirmers = self._confirmations[tx.index]
                if tx.confirmation_count != len(confirmers):
                    raise RuntimeError(
                        f"Transaction {tx.index}: count {tx.confirmation_count} "
                        f"!= {len(confirmers)} confirmers"
                    )
                if not 0 <= tx.confirmation_count <= owner_count:
                    raise RuntimeError(f"Transaction {tx.index}: count {tx.confirmation_count} out of range")
                strangers = [o for o in confirmers if not self.config.is_owner(o)]
                if strangers:
                    raise RuntimeError(f"Transaction {tx.index}: non-owner confirmations {strangers}")
