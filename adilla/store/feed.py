"""Live snapshot fan-out for store collections."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from adilla.errors import StoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

Unsubscribe = Callable[[], None]


def _noop() -> None:
    return None


class SnapshotFeed(Generic[T]):
    """Pushes the full ordered collection to every subscriber.

    Subscribers get the current snapshot when they subscribe and again on
    every ``publish()``. Each delivery is the whole collection, never a diff.
    """

    def __init__(self, name: str, fetch: Callable[[], list[T]]):
        self.name = name
        self._fetch = fetch
        self._subscribers: dict[int, Callable[[list[T]], None]] = {}
        self._next_token = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _snapshot(self) -> list[T] | None:
        try:
            return self._fetch()
        except StoreUnavailable as e:
            logger.error("Error fetching %s snapshot: %s", self.name, e)
            return None

    def _deliver(self, callback: Callable[[list[T]], None], items: list[T]) -> None:
        try:
            callback(list(items))
        except Exception:
            logger.exception("A %s subscriber failed while handling a snapshot", self.name)

    def subscribe(self, callback: Callable[[list[T]], None]) -> Unsubscribe:
        """Register a callback and send it the current snapshot.

        When the store cannot be read the callback receives an empty list
        and a no-op unsubscribe is returned.
        """
        items = self._snapshot()
        if items is None:
            self._deliver(callback, [])
            return _noop

        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback
        logger.debug("%s subscriber %d added", self.name, token)
        self._deliver(callback, items)

        def unsubscribe() -> None:
            if self._subscribers.pop(token, None) is not None:
                logger.debug("%s subscriber %d removed", self.name, token)

        return unsubscribe

    def publish(self) -> None:
        """Send the current snapshot to all subscribers."""
        if not self._subscribers:
            return
        items = self._snapshot()
        if items is None:
            items = []
        for callback in list(self._subscribers.values()):
            self._deliver(callback, items)

    def clear(self) -> None:
        self._subscribers.clear()
