"""In-memory state of the web UI."""

import asyncio
from collections import deque
from datetime import datetime
from typing import Deque, Iterable, List, Optional, Set
import threading
import queue

from trackline.core.config import Config
from trackline.services.history import HistoryStream
from trackline.services.identity import OperatorIdentity
from trackline.services.positioning import ReportedPositionProvider
from trackline.services.store import JsonLocationStore
from trackline.services.tracking import TrackingController
from trackline.services.window_filter import WindowFilter


class LogBuffer:
    """Bounded log of the running server, shared with SSE subscribers.

    The log stream endpoint reads subscriber queues from executor threads,
    so every access goes through the lock. A subscriber that does not keep
    up loses entries instead of blocking the logger.
    """

    def __init__(self, max_entries: int = 1000, subscriber_queue_size: int = 100):
        self.max_entries = max_entries
        self.subscriber_queue_size = subscriber_queue_size
        self.entries: Deque[dict] = deque(maxlen=max_entries)
        self.lock = threading.Lock()
        self.subscribers: List[queue.Queue] = []
        self.dropped = 0

    def add(self, level: str, message: str, data: Optional[dict] = None) -> dict:
        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "message": message,
            "data": data,
        }

        with self.lock:
            self.entries.append(entry)
            for q in self.subscribers:
                try:
                    q.put_nowait(entry)
                except queue.Full:
                    self.dropped += 1
        return entry

    def get_all(self, levels: Optional[Iterable[str]] = None) -> List[dict]:
        """Returns the buffered entries, oldest first.

        Args:
            levels: Only entries of these levels (default all)
        """
        wanted = set(levels) if levels else None
        with self.lock:
            return [e for e in self.entries if wanted is None or e["level"] in wanted]

    def clear(self) -> None:
        with self.lock:
            self.entries.clear()

    def subscribe(self) -> queue.Queue:
        """Registers a queue receiving every new entry."""
        q = queue.Queue(maxsize=self.subscriber_queue_size)
        with self.lock:
            self.subscribers.append(q)
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self.lock:
            if q in self.subscribers:
                self.subscribers.remove(q)


# Global log buffer
log_buffer = LogBuffer()


class AppState:
    """Global application state: the wired tracking components."""

    def __init__(self):
        self.config: Optional[Config] = None
        self.store: Optional[JsonLocationStore] = None
        self.provider: Optional[ReportedPositionProvider] = None
        self.identity: Optional[OperatorIdentity] = None
        self.controller: Optional[TrackingController] = None
        self.stream: Optional[HistoryStream] = None
        self.window_filter: WindowFilter = WindowFilter()
        self.background_tasks: Set[asyncio.Task] = set()

    @property
    def signed_in(self) -> bool:
        return bool(self.identity and self.identity.current_operator())

    def tracking_dict(self) -> dict:
        """Tracking status for JSON response."""
        data = self.controller.status.to_dict()
        data["position_requested"] = bool(self.provider and self.provider.pending)
        data["signed_in"] = self.signed_in
        return data


# Global app state
app_state = AppState()
