"""Minimal observer registry."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Observable(Generic[T]):
    """Holds subscribers and delivers values to each of them.

    A subscriber that raises is logged and does not stop delivery to the rest.
    """

    _subscribers: list[Callable[[T], None]] = field(default_factory=list)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback and return a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(callback)

        return unsubscribe

    def unsubscribe(self, callback: Callable[[T], None]) -> None:
        """Remove a callback; unknown callbacks are ignored."""
        self._subscribers = [cb for cb in self._subscribers if cb is not callback]

    def notify(self, value: T) -> None:
        """Deliver a value to every subscriber."""
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber failed")

    def __len__(self) -> int:
        return len(self._subscribers)
