"""Keeps a map in sync with the history and the selected window."""

from datetime import date
from typing import Callable, List, Optional

from trackline.models.history import HistorySnapshot
from trackline.models.location import LocationRecord
from trackline.models.window import TimeOfDay, TimeWindow
from trackline.services.history import HistoryStream
from trackline.services.map_projector import MapProjector
from trackline.services.window_filter import WindowFilter, local_today


class MapView:
    """Recomputes the filter and redraws on every history or window change."""

    def __init__(
        self,
        stream: HistoryStream,
        projector: MapProjector,
        window_filter: WindowFilter,
        window: Optional[TimeWindow] = None,
    ):
        self.stream = stream
        self.projector = projector
        self.window_filter = window_filter
        self.window = window or TimeWindow(date=local_today(window_filter.tz))
        self.visible: List[LocationRecord] = []
        self._remove_listener: Optional[Callable[[], None]] = None

    def attach(self) -> None:
        """Starts following the history stream and renders once."""
        if self._remove_listener is None:
            self._remove_listener = self.stream.add_listener(self._on_history)
        self.refresh()

    def detach(self) -> None:
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None

    def select_window(self, window: TimeWindow) -> None:
        self.window = window
        self.refresh()

    def select_date(self, day: date) -> None:
        self.select_window(TimeWindow(date=day, start=self.window.start, end=self.window.end))

    def select_start(self, start: TimeOfDay) -> None:
        self.select_window(TimeWindow(date=self.window.date, start=start, end=self.window.end))

    def select_end(self, end: TimeOfDay) -> None:
        self.select_window(TimeWindow(date=self.window.date, start=self.window.start, end=end))

    def refresh(self, snapshot: Optional[HistorySnapshot] = None) -> List[LocationRecord]:
        """Filters the snapshot (default: the stream's current one) and redraws."""
        history = snapshot if snapshot is not None else self.stream.snapshot
        self.visible = self.window_filter.filter(history, self.window)
        self.projector.render(self.visible)
        return self.visible

    def _on_history(self, snapshot: HistorySnapshot) -> None:
        self.refresh(snapshot)
