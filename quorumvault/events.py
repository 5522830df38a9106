"""Notification events emitted by the authorization engine.

Events are delivered synchronously to a :class:`NotificationSink` in the
order the triggering operations completed. Each event carries a sequence
number assigned by the engine so external observers (audit logs, indexers)
can detect gaps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Protocol, Sequence

from quorumvault.json import JSONable
from quorumvault.types import Address


class EventKind(Enum):
    """Kinds of notifications emitted by the engine."""

    DEPOSITED = "deposited"
    PROPOSED = "proposed"
    CONFIRMED = "confirmed"
    REVOKED = "revoked"
    EXECUTED = "executed"
    EXECUTION_FAILURE = "execution_failure"


@dataclass(frozen=True)
class Event(JSONable):
    """Common base for all events."""

    sequence: int

    @property
    def kind(self) -> EventKind:  # pragma: no cover - overridden
        raise NotImplementedError

    def to_payload(self) -> Dict[str, Any]:
        """Convert the event to a serialisable payload."""
        payload = self._to_jsonable(self)
        payload["kind"] = self.kind.value
        return payload


@dataclass(frozen=True)
class Deposited(Event):
    sender: Address
    amount: int
    new_balance: int

    @property
    def kind(self) -> EventKind:
        return EventKind.DEPOSITED


@dataclass(frozen=True)
class Proposed(Event):
    owner: Address
    index: int
    target: Address
    value: int
    payload: bytes

    @property
    def kind(self) -> EventKind:
        return EventKind.PROPOSED


@dataclass(frozen=True)
class Confirmed(Event):
    owner: Address
    index: int

    @property
    def kind(self) -> EventKind:
        return EventKind.CONFIRMED


@dataclass(frozen=True)
class Revoked(Event):
    owner: Address
    index: int

    @property
    def kind(self) -> EventKind:
        return EventKind.REVOKED


@dataclass(frozen=True)
class Executed(Event):
    owner: Address
    index: int

    @property
    def kind(self) -> EventKind:
        return EventKind.EXECUTED


@dataclass(frozen=True)
class ExecutionFailure(Event):
    """The dispatcher failed a transaction that had reached quorum."""

    owner: Address
    index: int
    reason: str

    @property
    def kind(self) -> EventKind:
        return EventKind.EXECUTION_FAILURE


class NotificationSink(Protocol):
    """Protocol that any event consumer must implement."""

    def emit(self, event: Event) -> None:  # pragma: no cover
        """Receive *event*.

        Called while the engine still holds its lock, so implementations
        **should** return quickly and **must not** block on other engine
        callers.
        """


@dataclass
class EventLog:
    """In-memory, ordered event sink."""

    events: List[Event] = field(default_factory=list)

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> List[Event]:
        """Return recorded events of the given kind, oldest first."""
        return [event for event in self.events if event.kind == kind]

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self.events)


class FanoutSink:
    """Forward each event to several sinks in registration order."""

    def __init__(self, sinks: Sequence[NotificationSink] = ()) -> None:
        self.sinks: List[NotificationSink] = list(sinks)

    def add(self, sink: NotificationSink) -> None:
        self.sinks.append(sink)

    def emit(self, event: Event) -> None:
        for sink in self.sinks:
            sink.emit(event)


__all__ = [
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
]
