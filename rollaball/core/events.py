from __future__ import annotations

import logging
from typing import Any, Callable, List, Tuple

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]


def _callback_name(callback: Callback) -> str:
    return getattr(callback, "__qualname__", None) or getattr(callback, "__name__", repr(callback))


class Event:
    """A single observable event.

    Subscribing the same callback twice is a no-op, so a handler never fires
    twice for one emit. Subscribers run in subscription order, on the caller's
    thread, against a snapshot taken when ``emit`` starts.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._subscribers: List[Callback] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def is_subscribed(self, callback: Callback) -> bool:
        return callback in self._subscribers

    def subscribe(self, callback: Callback) -> None:
        if not callable(callback):
            raise TypeError("callback must be callable")
        if callback in self._subscribers:
            return
        self._subscribers.append(callback)
        logger.debug("Subscribed %s to '%s'", _callback_name(callback), self.name)

    def unsubscribe(self, callback: Callback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)
            logger.debug("Unsubscribed %s from '%s'", _callback_name(callback), self.name)

    def emit(self, *args: Any) -> None:
        for callback in list(self._subscribers):
            callback(*args)

    def clear(self) -> None:
        self._subscribers.clear()


class SubscriptionScope:
    """Subscriptions bound to the lifetime of one owner (usually a loaded scene).

    ``dispose`` undoes every ``bind`` made through the scope; the scope can be
    reused afterwards.
    """

    def __init__(self) -> None:
        self._bindings: List[Tuple[Event, Callback]] = []

    def __len__(self) -> int:
        return len(self._bindings)

    def bind(self, event: Event, callback: Callback) -> None:
        if (event, callback) in self._bindings:
            return
        event.subscribe(callback)
        self._bindings.append((event, callback))

    def dispose(self) -> None:
        for event, callback in reversed(self._bindings):
            event.unsubscribe(callback)
        self._bindings.clear()
