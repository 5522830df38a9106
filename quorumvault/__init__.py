"""QuorumVault: quorum-gated transaction authorization.

A fixed set of owners jointly controls a shared pool of value and outbound
calls. Proposed transactions execute only after ``threshold`` distinct owners
confirmed them, and at most once.

  - quorumvault.engine      the authorization engine (state machine)
  - quorumvault.types       addresses, transactions, owner configuration
  - quorumvault.errors      error taxonomy
  - quorumvault.events      notifications and sinks
  - quorumvault.dispatch    value-transfer collaborators (in-memory, web3)
  - quorumvault.config      environment settings
  - quorumvault.logger      audit logging
"""

from __future__ import annotations

# Domain types
from .types import (  # noqa: F401
    Address,
    NULL_ADDRESS,
    ExecutionPolicy,
    OwnerConfig,
    Transaction,
    TransactionSnapshot,
    TransactionStatus,
    to_address,
)

# Errors
from .errors import (  # noqa: F401
    VaultError,
    ConstructionError,
    OwnersRequired,
    InvalidThreshold,
    InvalidOwner,
    DuplicateOwner,
    OperationError,
    NotOwner,
    TransactionNotFound,
    AlreadyExecuted,
    AlreadyConfirmed,
    NotConfirmed,
    QuorumNotMet,
    ExecutionFailed,
)

# Events
from .events import (  # noqa: F401
    EventKind,
    Event,
    Deposited,
    Proposed,
    Confirmed,
    Revoked,
    Executed,
    ExecutionFailure,
    NotificationSink,
    EventLog,
    FanoutSink,
)

# Collaborators
from .dispatch import Dispatcher, DispatchResult, InMemoryPool, Web3Dispatcher  # noqa: F401

# Engine
from .engine import AuthorizationEngine  # noqa: F401

# Config and logging
from .config import Settings, get_settings  # noqa: F401
from .logger import AuditLogger, configure_logging  # noqa: F401

__all__ = [
    # core
    "Address",
    "NULL_ADDRESS",
    "ExecutionPolicy",
    "OwnerConfig",
    "Transaction",
    "TransactionSnapshot",
    "TransactionStatus",
    "to_address",
    "AuthorizationEngine",
    # errors
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
    # events
    "EventKind",
    "Event",
    "Deposited",
    "Proposed",
    "Confirmed",
    "Revoked",
    "Executed",
    "ExecutionFailure",
    "NotificationSink",
    "EventLog",
    "FanoutSink",
    # infra
    "Dispatcher",
    "DispatchResult",
    "InMemoryPool",
    "Web3Dispatcher",
    "Settings",
    "get_settings",
    "AuditLogger",
    "configure_logging",
]
