"""
Race options and candidate input normalization using Pydantic v2
Turns raw race arguments into producers the coordinator can subscribe to
"""

import asyncio
import concurrent.futures
import logging
from collections.abc import Iterable
from typing import Any, Dict, List, Optional, Sequence, Union

import reactivex
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from reactivex import abc

logger = logging.getLogger(__name__)

# ==================== OPTIONS ====================


class RaceOptions(BaseModel):
    """Per-call race configuration"""

    # Used when a plain iterable has to be turned into a producer
    scheduler: Optional[abc.SchedulerBase] = Field(
        None, description="Scheduler for iterable candidates"
    )
    passthrough_single: bool = Field(
        True, description="Return a lone candidate directly instead of racing it"
    )
    label: Optional[str] = Field(
        None, min_length=1, max_length=100, description="Name used in log records"
    )

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: Optional[str]) -> Optional[str]:
        """Strip the label and reject blank ones"""
        if v is None:
            return v
        v = v.strip()
        if len(v) == 0:
            raise ValueError("label cannot be blank")
        return v

    model_config = ConfigDict(
        arbitrary_types_allowed=True, extra="forbid", frozen=True
    )


# ==================== ADAPTATION ====================


class CandidateAdaptationError(TypeError):
    """A race argument cannot be turned into an event producer"""

    def __init__(self, raw: Any, index: Optional[int] = None) -> None:
        self.raw = raw
        self.index = index
        where = f" at position {index}" if index is not None else ""
        super().__init__(
            f"cannot race {type(raw).__name__} object{where}: expected an "
            "observable, a future or an iterable"
        )


def args_or_arg_array(args: Sequence[Any]) -> List[Any]:
    """Collapse race([a, b]) and race(a, b) into the same candidate list.

    Examples:
        - (a, b) → [a, b]
        - ([a, b],) → [a, b]
        - ((a, b),) → [a, b]
        - ([],) → []
        - (obs,) → [obs]
    """
    if len(args) == 1 and isinstance(args[0], (list, tuple)):
        return list(args[0])
    return list(args)


def adapt_candidate(
    raw: Any,
    scheduler: Optional[abc.SchedulerBase] = None,
    index: Optional[int] = None,
) -> abc.ObservableBase[Any]:
    """Turn one race argument into an event producer.

    Args:
        raw: Observable, asyncio/concurrent future, or any iterable
        scheduler: Optional scheduler for iterable candidates
        index: Position of the argument, used in the error message

    Returns:
        The observable itself, or a reactivex wrapper around the input

    Raises:
        CandidateAdaptationError: if the input has no producer form
    """
    if isinstance(raw, abc.ObservableBase):
        return raw
    if isinstance(raw, (asyncio.Future, concurrent.futures.Future)):
        return reactivex.from_future(raw)
    if isinstance(raw, Iterable):
        return reactivex.from_iterable(raw, scheduler=scheduler)
    raise CandidateAdaptationError(raw, index)


class InputNormalizer:
    """Utility class for race input normalization"""

    @staticmethod
    def validate_options(
        options: Union[RaceOptions, Dict[str, Any], None],
    ) -> RaceOptions:
        """
        Validate race options

        Returns:
            RaceOptions: Validated options (defaults when None)

        Raises:
            ValueError: If validation fails
        """
        if options is None:
            return RaceOptions()
        if isinstance(options, RaceOptions):
            return options
        try:
            validated = RaceOptions(**options)
        except (ValidationError, TypeError) as e:
            logger.warning(f"Race options validation failed: {e}")
            raise ValueError(f"Invalid race options: {str(e)}")
        logger.debug(f"Normalized race options: {validated!r}")
        return validated

    @staticmethod
    def adapt_all(
        raw_candidates: Sequence[Any], scheduler: Optional[abc.SchedulerBase] = None
    ) -> List[abc.ObservableBase[Any]]:
        """
        Adapt every candidate, in order

        Raises:
            CandidateAdaptationError: On the first input that cannot be adapted
        """
        adapted: List[abc.ObservableBase[Any]] = []
        for index, raw in enumerate(raw_candidates):
            try:
                adapted.append(adapt_candidate(raw, scheduler, index))
            except CandidateAdaptationError as e:
                logger.warning(f"Candidate adaptation failed: {e}")
                raise
        return adapted


# ==================== EXPORT ====================

__all__ = [
    "RaceOptions",
    "CandidateAdaptationError",
    "InputNormalizer",
    "adapt_candidate",
    "args_or_arg_array",
]
