"""Live ordered view of the location history."""

import asyncio
from typing import AsyncIterator, Callable, List, Optional

from trackline.core.exceptions import StoreSubscriptionFailure
from trackline.core.logger import log_call, log_error, log_info
from trackline.models.history import HistorySnapshot
from trackline.services.store import LocationStore, Subscription

SnapshotListener = Callable[[HistorySnapshot], None]


class HistoryStream:
    """Holds the latest snapshot pushed by the store subscription.

    Purely reactive: never writes to the store. Use as a context manager
    so the subscription is released on every exit path::

        with HistoryStream(store) as stream:
            ...
    """

    def __init__(self, store: LocationStore):
        self.store = store
        self._snapshot = HistorySnapshot()
        self._subscription: Optional[Subscription] = None
        self._listeners: List[SnapshotListener] = []
        self.error: Optional[str] = None

    @property
    def snapshot(self) -> HistorySnapshot:
        return self._snapshot

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    def subscribe(self) -> None:
        """Opens the standing subscription (ascending by timestamp)."""
        if self._subscription is not None:
            return
        log_call("HistoryStream", "subscribe")
        self.error = None
        self._subscription = self.store.subscribe_ordered(
            self._apply,
            on_error=self._on_error,
            order_by="timestamp",
        )

    def unsubscribe(self) -> None:
        """Releases the subscription. Safe to call more than once."""
        if self._subscription is None:
            return
        self._subscription.unsubscribe()
        self._subscription = None
        log_info("history subscription released")

    def add_listener(self, listener: SnapshotListener) -> Callable[[], None]:
        """Registers a listener for new snapshots.

        Returns:
            Function removing the listener
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def updates(self, keepalive: Optional[float] = None) -> AsyncIterator[Optional[HistorySnapshot]]:
        """Yields the current snapshot, then every new one.

        Args:
            keepalive: Seconds without a snapshot after which None is yielded
        """
        queue: asyncio.Queue = asyncio.Queue()
        remove = self.add_listener(queue.put_nowait)
        try:
            yield self._snapshot
            while True:
                try:
                    snapshot = await asyncio.wait_for(queue.get(), timeout=keepalive)
                except asyncio.TimeoutError:
                    yield None
                    continue
                # Only the newest pending snapshot matters
                while not queue.empty():
                    snapshot = queue.get_nowait()
                yield snapshot
        finally:
            remove()

    def _apply(self, snapshot: HistorySnapshot) -> None:
        self._snapshot = snapshot
        self.error = None
        log_info(f"history snapshot: {len(snapshot)} points")
        for listener in list(self._listeners):
            listener(snapshot)

    def _on_error(self, error: Exception) -> None:
        failure = StoreSubscriptionFailure(f"Error fetching location history: {error}")
        self.error = str(failure)
        log_error(self.error)

    def __enter__(self) -> "HistoryStream":
        self.subscribe()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()
