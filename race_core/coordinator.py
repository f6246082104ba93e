"""Runtime side of a race: owns subscriptions and executes transition actions."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, TypeVar

from reactivex import abc
from reactivex.disposable import SingleAssignmentDisposable
from reactivex.notification import Notification

from .bridge import SlotSubscription
from .transitions import apply_event, default_state
from .types import (
    Cancelled,
    CandidateArrived,
    EnumerationCompleted,
    EnumerationFailed,
    RaceEvent,
    RaceState,
    SlotAttached,
    SlotNotified,
)

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class RaceCoordinator(abc.ObserverBase[abc.ObservableBase[_T]], abc.DisposableBase):
    """
    Observes the higher-order stream of candidates and relays the winner.

    The coordinator owns the subscription table (slot -> SlotSubscription).
    Every event goes through apply_event(); the new state is committed before
    any action runs, so a consumer that disposes from inside on_next sees a
    consistent race.

    Disposing the coordinator cancels the race.
    """

    def __init__(
        self, destination: abc.ObserverBase[_T], label: Optional[str] = None
    ) -> None:
        self._destination = destination
        self._label = label or f"race@{id(self):x}"
        self._state = default_state()
        self._handles: Dict[int, SlotSubscription] = {}
        self._enumeration = SingleAssignmentDisposable()

    @property
    def state(self) -> RaceState:
        return self._state

    @property
    def active_slots(self) -> Tuple[int, ...]:
        """Slots whose subscription handle is still held."""
        return tuple(sorted(self._handles))

    def run(
        self, candidates: abc.ObservableBase[abc.ObservableBase[_T]]
    ) -> abc.DisposableBase:
        """Subscribe to the candidate stream; returns self for disposal."""
        self._enumeration.disposable = candidates.subscribe(self)
        return self

    # candidate stream observer

    def on_next(self, value: abc.ObservableBase[_T]) -> None:
        self._apply(CandidateArrived(value))

    def on_error(self, error: Exception) -> None:
        self._apply(EnumerationFailed(error))

    def on_completed(self) -> None:
        self._apply(EnumerationCompleted())

    def dispose(self) -> None:
        self._apply(Cancelled())
        self._enumeration.dispose()

    def _notify(self, slot: int, notification: Notification[Any]) -> None:
        self._apply(SlotNotified(slot, notification))

    def _apply(self, event: RaceEvent) -> None:
        previous = self._state
        outcome = apply_event(previous, event)
        self._state = outcome.state

        if outcome.state.winner is not None and previous.winner is None:
            logger.debug(f"{self._label}: slot {outcome.state.winner} won")

        for slot in outcome.release:
            self._release(slot)
        for notification in outcome.forward:
            notification.accept(self._destination)
        for slot in outcome.release_after:
            self._release(slot)
        if outcome.subscribe:
            self._subscribe_all(outcome.subscribe)

    def _subscribe_all(self, slots: Tuple[int, ...]) -> None:
        for slot in slots:
            # A synchronous emitter in an earlier slot may already have won.
            if self._state.phase != "racing":
                break
            handle = SlotSubscription(slot, self._notify)
            self._handles[slot] = handle
            self._apply(SlotAttached(slot))
            handle.attach(self._state.candidates[slot])

    def _release(self, slot: int) -> None:
        handle = self._handles.pop(slot, None)
        if handle is None:
            return
        logger.debug(f"{self._label}: releasing slot {slot}")
        handle.dispose()
