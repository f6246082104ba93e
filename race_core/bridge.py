"""Slot-tagged subscriptions to race candidates."""
from __future__ import annotations

from typing import Any, Callable

from reactivex import abc
from reactivex.disposable import SingleAssignmentDisposable
from reactivex.notification import Notification, OnCompleted, OnError, OnNext

SlotNotify = Callable[[int, Notification[Any]], None]


class SlotSubscription(abc.DisposableBase):
    """Releasable handle for one candidate subscription.

    Every notification the candidate delivers is reported as
    notify(slot, notification). Once disposed, nothing more is reported,
    and a subscription assigned after disposal is disposed right away.
    """

    def __init__(self, slot: int, notify: SlotNotify) -> None:
        self.slot = slot
        self._notify = notify
        self._subscription = SingleAssignmentDisposable()

    @property
    def is_disposed(self) -> bool:
        return self._subscription.is_disposed

    def attach(self, producer: abc.ObservableBase[Any]) -> None:
        """Subscribe to `producer`. A raising subscribe counts as its error."""
        try:
            subscription = producer.subscribe(
                self._on_next, self._on_error, self._on_completed
            )
        except Exception as error:
            self._on_error(error)
            return
        self._subscription.disposable = subscription

    def dispose(self) -> None:
        self._subscription.dispose()

    def _on_next(self, value: Any) -> None:
        if not self.is_disposed:
            self._notify(self.slot, OnNext(value))

    def _on_error(self, error: Exception) -> None:
        if not self.is_disposed:
            self._notify(self.slot, OnError(error))

    def _on_completed(self) -> None:
        if not self.is_disposed:
            self._notify(self.slot, OnCompleted())
