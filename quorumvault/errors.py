"""Error taxonomy for the QuorumVault authorization engine.

Construction errors are raised before any engine state exists. Operation
errors are raised before any mutation happens, with the single exception of
:class:`ExecutionFailed`, which is raised after the transaction has been
marked executed (see :class:`quorumvault.engine.ExecutionPolicy`).
"""

from __future__ import annotations

from typing import Any, Optional


class VaultError(Exception):
    """Base class for every error raised by the vault."""


# Construction -----------------------------------------------------------------


class ConstructionError(VaultError):
    """The owner set or threshold handed to the engine is unusable."""


class OwnersRequired(ConstructionError):
    """The owner set is empty."""

    def __init__(self) -> None:
        super().__init__("At least one owner is required")


class InvalidThreshold(ConstructionError):
    """Threshold is zero or larger than the owner count."""

    def __init__(self, threshold: int, owner_count: int) -> None:
        self.threshold = threshold
        self.owner_count = owner_count
        super().__init__(f"Threshold must be between 1 and {owner_count}, got {threshold}")


class InvalidOwner(ConstructionError):
    """An owner identity is the null address or not an address at all."""

    def __init__(self, owner: Any) -> None:
        self.owner = owner
        super().__init__(f"Invalid owner identity: {owner!r}")


class DuplicateOwner(ConstructionError):
    """The same owner identity appears more than once."""

    def __init__(self, owner: str) -> None:
        self.owner = owner
        super().__init__(f"Owner {owner} listed more than once")


# Operations -------------------------------------------------------------------


class OperationError(VaultError):
    """A propose/confirm/revoke/execute call was rejected."""


class NotOwner(OperationError):
    def __init__(self, caller: Any) -> None:
        self.caller = caller
        super().__init__(f"{caller} is not an owner")


class TransactionNotFound(OperationError):
    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Transaction {index} does not exist")


class AlreadyExecuted(OperationError):
    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Transaction {index} has already been executed")


class AlreadyConfirmed(OperationError):
    def __init__(self, caller: str, index: int) -> None:
        self.caller = caller
        self.index = index
        super().__init__(f"{caller} already confirmed transaction {index}")


class NotConfirmed(OperationError):
    def __init__(self, caller: str, index: int) -> None:
        self.caller = caller
        self.index = index
        super().__init__(f"{caller} has not confirmed transaction {index}")


class QuorumNotMet(OperationError):
    def __init__(self, index: int, confirmations: int, threshold: int) -> None:
        self.index = index
        self.confirmations = confirmations
        self.threshold = threshold
        super().__init__(
            f"Transaction {index} has {confirmations} of {threshold} required confirmations"
        )


class ExecutionFailed(OperationError):
    """The dispatcher refused or failed the transfer/call."""

    def __init__(self, index: int, reason: Optional[str] = None) -> None:
        self.index = index
        self.reason = reason
        message = f"Execution of transaction {index} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


__all__ = [
    "VaultError",
    "ConstructionError",
    "OwnersRequired",
    "InvalidThreshold",
    "InvalidOwner",
    "DuplicateOwner",
    "OperationError",
    "NotOwner",
    "TransactionNotFound",
    "AlreadyExecuted",
    "AlreadyConfirmed",
    "NotConfirmed",
    "QuorumNotMet",
    "ExecutionFailed",
]
