"""Core race state transitions (pure, no subscriptions, no I/O).

This module implements the decision logic of the first-to-emit-wins combinator.
All functions are deterministic and side-effect free: they never subscribe,
dispose or call an observer.

Architecture:
- State is a frozen RaceState (phase, outcome, candidates, active slots, winner)
- Events are small frozen dataclasses (CandidateArrived, SlotNotified, Cancelled, ...)
- apply_event() takes (state, event) and returns TransitionOutcome with the new state
  plus the actions the caller must perform: release, forward, release_after, subscribe
- The runtime (RaceCoordinator) owns the subscription handles and executes the actions

Key concepts:
- slot: zero-based position of a candidate in the order the collector emitted it
- active: slots that own a live subscription; () or (winner,) once decided
- winner: the slot whose notification arrived first, whatever its kind
- Tie-break: slots are subscribed in order, so a synchronous emitter in a lower
  slot decides the race before later slots are ever subscribed

Phases:
- collecting: buffering candidates, nothing subscribed
- racing: every candidate is being subscribed, no notification seen yet
- decided: a value arrived; only the winner's notifications are forwarded
- terminal: finished (completed, failed, empty or cancelled); every event is ignored
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Tuple

from reactivex.notification import OnCompleted, OnError

from .types import (
    Cancelled,
    CandidateArrived,
    EnumerationCompleted,
    EnumerationFailed,
    RaceEvent,
    RaceState,
    SlotAttached,
    SlotNotified,
    TransitionOutcome,
)

logger = logging.getLogger(__name__)


def default_state() -> RaceState:
    """Create the initial state of a race: collecting, no candidates."""
    return RaceState()


def _check_slot(state: RaceState, slot: int) -> None:
    if isinstance(slot, bool) or not isinstance(slot, int):
        raise ValueError(f"slot must be an int, got {slot!r}")
    if slot < 0 or slot >= len(state.candidates):
        raise ValueError(
            f"slot {slot} out of range for {len(state.candidates)} candidates"
        )


def _others(active: Tuple[int, ...], slot: int) -> Tuple[int, ...]:
    return tuple(s for s in active if s != slot)


def _apply_transition(state: RaceState, event: RaceEvent) -> TransitionOutcome:
    """Apply one event to a race state.

    Args:
        state: Current race state (frozen, never mutated)
        event: One of the RaceEvent dataclasses

    Returns:
        TransitionOutcome with the next state and the actions to run, in order:
        release, forward, release_after, subscribe

    Raises:
        ValueError: if the event violates the collaborator contracts
            (candidate after enumeration, notification before racing,
            unknown slot)
    """
    phase = state.phase

    if phase == "terminal":
        if isinstance(event, SlotAttached):
            return TransitionOutcome(state=state, release=(event.slot,))
        return TransitionOutcome(state=state)

    if isinstance(event, CandidateArrived):
        if phase != "collecting":
            raise ValueError("candidate arrived after enumeration completed")
        return TransitionOutcome(
            state=replace(state, candidates=state.candidates + (event.candidate,))
        )

    if isinstance(event, EnumerationCompleted):
        if phase != "collecting":
            raise ValueError("enumeration completed twice")
        if not state.candidates:
            return TransitionOutcome(
                state=replace(state, phase="terminal", outcome="terminated_empty"),
                forward=(OnCompleted(),),
            )
        return TransitionOutcome(
            state=replace(state, phase="racing"),
            subscribe=tuple(range(len(state.candidates))),
        )

    if isinstance(event, EnumerationFailed):
        if phase != "collecting":
            raise ValueError("enumeration failed after it completed")
        return TransitionOutcome(
            state=replace(state, phase="terminal"),
            forward=(OnError(event.error),),
        )

    if isinstance(event, SlotAttached):
        if phase == "collecting":
            raise ValueError("cannot attach a slot while still collecting")
        _check_slot(state, event.slot)
        if phase != "racing":
            # Decided between scheduling the attach and performing it.
            return TransitionOutcome(state=state, release=(event.slot,))
        if event.slot in state.active:
            raise ValueError(f"slot {event.slot} is already attached")
        return TransitionOutcome(
            state=replace(state, active=state.active + (event.slot,))
        )

    if isinstance(event, SlotNotified):
        if phase == "collecting":
            raise ValueError("notification received before racing started")
        _check_slot(state, event.slot)
        slot = event.slot
        notification = event.notification
        terminal = notification.kind in ("E", "C")

        if phase == "racing":
            losers = _others(state.active, slot)
            if terminal:
                return TransitionOutcome(
                    state=replace(
                        state, phase="terminal", outcome="won", winner=slot, active=()
                    ),
                    forward=(notification,),
                    release=losers,
                    release_after=(slot,),
                )
            return TransitionOutcome(
                state=replace(
                    state, phase="decided", outcome="won", winner=slot, active=(slot,)
                ),
                forward=(notification,),
                release=losers,
            )

        # decided: only the winner may still speak
        if slot != state.winner:
            return TransitionOutcome(state=state)
        if terminal:
            return TransitionOutcome(
                state=replace(state, phase="terminal", active=()),
                forward=(notification,),
                release_after=(slot,),
            )
        return TransitionOutcome(state=state, forward=(notification,))

    if isinstance(event, Cancelled):
        return TransitionOutcome(
            state=replace(state, phase="terminal", active=()),
            release=state.active,
        )

    raise ValueError(f"unknown race event: {event!r}")


def apply_event(state: RaceState, event: RaceEvent) -> TransitionOutcome:
    """Apply a race event and log phase changes.

    See _apply_transition for the transition table.
    """
    outcome = _apply_transition(state, event)

    new_state = outcome.state
    if new_state.phase != state.phase:
        logger.debug(
            f"race {state.phase} -> {new_state.phase} on {type(event).__name__}"
            f" (outcome={new_state.outcome}, winner={new_state.winner})"
        )
    elif isinstance(event, SlotNotified) and not outcome.forward:
        logger.debug(f"ignored late notification from slot {event.slot}")

    return outcome
