"""In-process observer list."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import Any, Generic, TypeVar

import structlog

logger = structlog.get_logger(__name__)

C = TypeVar("C", bound=Callable[..., Any])

Unsubscribe = Callable[[], None]


class Subscribers(Generic[C]):
    """Ordered list of callbacks with unsubscribe closures.

    ``notify`` iterates over a snapshot, so callbacks may subscribe or
    unsubscribe (themselves or others) while a notification is running
    without affecting the current round.
    """

    def __init__(self, name: str = "subscribers") -> None:
        self._name = name
        self._ids = itertools.count()
        self._callbacks: list[tuple[int, C]] = []

    def subscribe(self, callback: C) -> Unsubscribe:
        """Register ``callback`` and return a closure that removes it."""
        key = next(self._ids)
        self._callbacks.append((key, callback))

        def unsubscribe() -> None:
            self._callbacks = [(k, cb) for k, cb in self._callbacks if k != key]

        return unsubscribe

    def notify(self, *args: Any) -> int:
        """Invoke every callback in registration order.

        Exceptions raised by a callback are logged and do not stop the
        remaining callbacks. Returns the number of callbacks invoked.
        """
        snapshot = list(self._callbacks)
        logger.debug("notify_subscribers", topic=self._name, count=len(snapshot))
        for _, callback in snapshot:
            try:
                callback(*args)
            except Exception:
                logger.exception("subscriber_failed", topic=self._name)
        return len(snapshot)

    def clear(self) -> None:
        self._callbacks = []

    def __len__(self) -> int:
        return len(self._callbacks)
