"""First-to-emit-wins combinator over observables.

race() subscribes to every candidate, mirrors whichever one delivers the
first notification (value, error or completion) and disposes all others as
soon as that happens.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Sequence, TypeVar, Union

import reactivex
from reactivex import Observable, abc
from reactivex.disposable import Disposable

from .coordinator import RaceCoordinator
from .validation import (
    CandidateAdaptationError,
    InputNormalizer,
    RaceOptions,
    args_or_arg_array,
)

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

Options = Union[RaceOptions, Dict[str, Any], None]


def collect_candidates(
    raw_candidates: Sequence[Any], scheduler: Optional[abc.SchedulerBase] = None
) -> Observable[abc.ObservableBase[Any]]:
    """Higher-order stream of the adapted candidates, in argument order.

    Adaptation happens on every subscription, so a bad argument fails the
    subscriber (on_error) instead of the race() call.
    """
    raw = tuple(raw_candidates)

    def subscribe(
        observer: abc.ObserverBase[abc.ObservableBase[Any]],
        _: Optional[abc.SchedulerBase] = None,
    ) -> abc.DisposableBase:
        try:
            candidates = InputNormalizer.adapt_all(raw, scheduler)
        except CandidateAdaptationError as error:
            observer.on_error(error)
            return Disposable()
        for candidate in candidates:
            observer.on_next(candidate)
        observer.on_completed()
        return Disposable()

    return reactivex.create(subscribe)


def _single(raw: Any, scheduler: Optional[abc.SchedulerBase]) -> abc.ObservableBase[Any]:
    if isinstance(raw, abc.ObservableBase):
        return raw
    return reactivex.defer(lambda _: InputNormalizer.adapt_all((raw,), scheduler)[0])


def race(*sources: Any, options: Options = None) -> abc.ObservableBase[Any]:
    """Mirror the first candidate to deliver any notification.

    Examples:
        >>> winner = race(xs, ys, zs)
        >>> winner = race([xs, ys, zs])
        >>> winner = race(xs, ys, options={"label": "fetch"})

    Args:
        sources: Candidates, or a single list/tuple of candidates. Each one
            may be an observable, a future or an iterable.
        options: RaceOptions, or a dict of its fields.

    Returns:
        An observable that, on subscription, subscribes to every candidate in
        order and forwards only the winner's notifications. With no
        candidates it completes immediately; with exactly one it is that
        candidate.

    Raises:
        ValueError: if options are invalid
    """
    opts = InputNormalizer.validate_options(options)
    raw = args_or_arg_array(sources)

    if len(raw) == 1 and opts.passthrough_single:
        return _single(raw[0], opts.scheduler)

    candidates = collect_candidates(raw, opts.scheduler)

    def subscribe(
        observer: abc.ObserverBase[Any], _: Optional[abc.SchedulerBase] = None
    ) -> abc.DisposableBase:
        logger.debug(f"racing {len(raw)} candidates")
        coordinator: RaceCoordinator[Any] = RaceCoordinator(observer, opts.label)
        return coordinator.run(candidates)

    return reactivex.create(subscribe)


def race_with(
    *others: Any, options: Options = None
) -> Callable[[abc.ObservableBase[_T]], abc.ObservableBase[Any]]:
    """Operator form: source.pipe(race_with(ys, zs)) is race(source, ys, zs).

    With no other candidates the source is returned unchanged.
    """
    rivals = args_or_arg_array(others)

    def _race_with(source: abc.ObservableBase[_T]) -> abc.ObservableBase[Any]:
        if not rivals:
            return source
        return race(source, *rivals, options=options)

    return _race_with
