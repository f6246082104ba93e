from .race import collect_candidates, race, race_with
from .coordinator import RaceCoordinator
from .bridge import SlotSubscription
from .transitions import apply_event, default_state
from .types import (
    Cancelled,
    CandidateArrived,
    EnumerationCompleted,
    EnumerationFailed,
    RaceEvent,
    RaceOutcome,
    RacePhase,
    RaceState,
    SlotAttached,
    SlotNotified,
    TransitionOutcome,
)
from .validation import (
    CandidateAdaptationError,
    InputNormalizer,
    RaceOptions,
    adapt_candidate,
    args_or_arg_array,
)

__all__ = [
    "race",
    "race_with",
    "collect_candidates",
    "RaceCoordinator",
    "SlotSubscription",
    "apply_event",
    "default_state",
    "Cancelled",
    "CandidateArrived",
    "EnumerationCompleted",
    "EnumerationFailed",
    "RaceEvent",
    "RaceOutcome",
    "RacePhase",
    "RaceState",
    "SlotAttached",
    "SlotNotified",
    "TransitionOutcome",
    "CandidateAdaptationError",
    "InputNormalizer",
    "RaceOptions",
    "adapt_candidate",
    "args_or_arg_array",
]
