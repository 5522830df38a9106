"""Base types and data structures for the QuorumVault authorization engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from web3 import Web3

from quorumvault.errors import DuplicateOwner, InvalidOwner, OwnersRequired
from quorumvault.json import JSONable
from quorumvault.quorum import validate_threshold


Address = str
NULL_ADDRESS: Address = "0x0000000000000000000000000000000000000000"


def to_address(value: Any) -> Address:  # noqa: ANN401
    """Return *value* as a checksummed address.

    Accepts hex strings (any casing, with or without ``0x``) and 20-byte
    binary addresses.

    Raises:
        ValueError: When *value* is not a 20-byte address.
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise ValueError(f"Binary address must be 20 bytes, got {len(value)}")
        value = "0x" + bytes(value).hex()
    if not isinstance(value, str):
        raise ValueError(f"Address must be str or bytes, got {type(value).__name__}")
    if not value.startswith(("0x", "0X")):
        value = "0x" + value
    # Mixed-case input has to carry a valid EIP-55 checksum
    if not Web3.is_address(value):
        raise ValueError(f"Not a valid address: {value!r}")
    return Web3.to_checksum_address(value)


def canonical_identity(value: Any) -> Any:  # noqa: ANN401
    """Checksum *value* when it is an address, otherwise return it unchanged.

    Targets are opaque to the engine; only address-shaped ones are
    normalised so that different spellings compare equal.
    """
    try:
        return to_address(value)
    except ValueError:
        return value


def is_null_address(value: Any) -> bool:  # noqa: ANN401
    """Return True for ``None`` and for the all-zero address."""
    if value is None:
        return True
    try:
        return to_address(value) == NULL_ADDRESS
    except ValueError:
        return False


class ExecutionPolicy(Enum):
    """What happens to a transaction whose dispatch fails.

    ``CONSUME`` keeps it marked executed, so it can never run again.
    ``REVERT`` clears the mark so owners may retry the execution.
    """

    CONSUME = "consume"
    REVERT = "revert"


class TransactionStatus(Enum):
    """Derived lifecycle status of a transaction."""

    PENDING = "pending"
    READY = "ready"
    EXECUTED = "executed"
    FAILED = "failed"


@dataclass
class Transaction:
    """A proposed value transfer plus call payload awaiting quorum.

    Only ``executed`` and ``confirmation_count`` change after creation, and
    only through :class:`quorumvault.engine.AuthorizationEngine`.
    """

    index: int
    proposer: Address
    target: Address
    value: int
    payload: bytes = b""
    executed: bool = False
    confirmation_count: int = 0
    # Set when the dispatcher reported a failure for this transaction.
    failure_reason: Optional[str] = None

    def snapshot(self) -> "TransactionSnapshot":
        """Return an immutable copy of the observable attributes."""
        return TransactionSnapshot(
            index=self.index,
            proposer=self.proposer,
            target=self.target,
            value=self.value,
            payload=self.payload,
            executed=self.executed,
            confirmation_count=self.confirmation_count,
        )


@dataclass(frozen=True)
class TransactionSnapshot(JSONable):
    """Read-only view of a transaction returned by the inspect operations."""

    index: int
    proposer: Address
    target: Address
    value: int
    payload: bytes
    executed: bool
    confirmation_count: int

    def to_payload(self) -> Dict[str, Any]:
        """Convert the snapshot to a JSON-safe dictionary."""
        return self._to_jsonable(self)


@dataclass(frozen=True)
class OwnerConfig:
    """Immutable owner set and confirmation threshold.

    Build it with :meth:`create`, which validates the inputs; the raw
    constructor trusts its arguments.
    """

    owners: Tuple[Address, ...]
    threshold: int
    _members: frozenset = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_members", frozenset(self.owners))

    @classmethod
    def create(cls, owners: Iterable[Any], threshold: int) -> "OwnerConfig":
        """Validate *owners* and *threshold* and return a config.

        Checks run in a fixed order: empty owner set, threshold bounds, null
        or malformed identities, then duplicates (after checksum
        normalisation, so two spellings of one address collide).

        Raises:
            OwnersRequired, InvalidThreshold, InvalidOwner, DuplicateOwner
        """
        raw = list(owners)
        if not raw:
            raise OwnersRequired()
        validate_threshold(threshold, len(raw))

        normalised = []
        for owner in raw:
            if is_null_address(owner):
                raise InvalidOwner(owner)
            try:
                normalised.append(to_address(owner))
            except ValueError as exc:
                raise InvalidOwner(owner) from exc

        seen = set()
        for owner in normalised:
            if owner in seen:
                raise DuplicateOwner(owner)
            seen.add(owner)

        return cls(owners=tuple(normalised), threshold=threshold)

    def is_owner(self, identity: Any) -> bool:  # noqa: ANN401
        """Membership test tolerant of non-normalised or malformed input."""
        if isinstance(identity, str) and identity in self._members:
            return True
        try:
            return to_address(identity) in self._members
        except ValueError:
            return False

    def to_payload(self) -> Dict[str, Any]:
        """Return owners and threshold as a JSON-safe dictionary."""
        return {"owners": list(self.owners), "threshold": self.threshold}
