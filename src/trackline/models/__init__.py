"""Data models for Trackline."""

from trackline.models.location import (
    GPSCoordinates,
    LocationRecord,
    NewLocation,
    PositionOptions,
    PositionSample,
)
from trackline.models.history import HistorySnapshot
from trackline.models.window import TimeOfDay, TimeWindow
from trackline.models.tracking import TrackingState, TrackingStatus

__all__ = [
    "GPSCoordinates",
    "LocationRecord",
    "NewLocation",
    "PositionOptions",
    "PositionSample",
    "HistorySnapshot",
    "TimeOfDay",
    "TimeWindow",
    "TrackingState",
    "TrackingStatus",
]
