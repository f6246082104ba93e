"""Type definitions for race state, events and transition outcomes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional, Tuple, Union

from reactivex import abc
from reactivex.notification import Notification

RacePhase = Literal["collecting", "racing", "decided", "terminal"]
RaceOutcome = Literal["undecided", "won", "terminated_empty"]


@dataclass(frozen=True)
class RaceState:
    """
    Snapshot of one race invocation.

    `candidates` is the Candidate Set (slot index = position).
    `active` holds the slots that currently own a live subscription,
    i.e. the keys of the coordinator's subscription table.
    """

    phase: RacePhase = "collecting"
    outcome: RaceOutcome = "undecided"
    candidates: Tuple[abc.ObservableBase[Any], ...] = ()
    active: Tuple[int, ...] = ()
    winner: Optional[int] = None


@dataclass(frozen=True)
class CandidateArrived:
    """The collector emitted the next candidate."""

    candidate: abc.ObservableBase[Any]


@dataclass(frozen=True)
class EnumerationCompleted:
    """The collector finished enumerating candidates."""


@dataclass(frozen=True)
class EnumerationFailed:
    """The collector failed (e.g. a candidate could not be adapted)."""

    error: Exception


@dataclass(frozen=True)
class SlotAttached:
    """A subscription handle for `slot` was recorded and is about to subscribe."""

    slot: int


@dataclass(frozen=True)
class SlotNotified:
    """A candidate delivered a notification (value, error or completion)."""

    slot: int
    notification: Notification[Any]


@dataclass(frozen=True)
class Cancelled:
    """The downstream consumer disposed its subscription."""


RaceEvent = Union[
    CandidateArrived,
    EnumerationCompleted,
    EnumerationFailed,
    SlotAttached,
    SlotNotified,
    Cancelled,
]


@dataclass(frozen=True)
class TransitionOutcome:
    """Result of applying one event to a race state."""

    state: RaceState
    # Notifications for the downstream consumer, in order.
    forward: Tuple[Notification[Any], ...] = ()
    # Slots released before anything is forwarded (losers, cancellation).
    release: Tuple[int, ...] = ()
    # Slots released once forwarding is done (the winner on termination).
    release_after: Tuple[int, ...] = ()
    # Slots to subscribe, in slot order.
    subscribe: Tuple[int, ...] = ()
