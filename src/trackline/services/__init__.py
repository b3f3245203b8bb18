"""Services for Trackline."""

from trackline.services.sample_source import SampleSource, CancellationToken, AsyncioClock
from trackline.services.store import JsonLocationStore, Subscription
from trackline.services.positioning import ReportedPositionProvider
from trackline.services.identity import OperatorIdentity
from trackline.services.tracking import TrackingController
from trackline.services.history import HistoryStream
from trackline.services.window_filter import WindowFilter
from trackline.services.map_projector import MapProjector
from trackline.services.map_layers import MapLayers
from trackline.services.map_view import MapView

__all__ = [
    "SampleSource",
    "CancellationToken",
    "AsyncioClock",
    "JsonLocationStore",
    "Subscription",
    "ReportedPositionProvider",
    "OperatorIdentity",
    "TrackingController",
    "HistoryStream",
    "WindowFilter",
    "MapProjector",
    "MapLayers",
    "MapView",
]
