"""Core modules for Trackline."""

from trackline.core.config import Config
from trackline.core.exceptions import (
    TracklineError,
    NotAuthorized,
    CapabilityUnavailable,
    PositionError,
    StoreWriteFailure,
    StoreSubscriptionFailure,
)
from trackline.core import logger

__all__ = [
    "Config",
    "TracklineError",
    "NotAuthorized",
    "CapabilityUnavailable",
    "PositionError",
    "StoreWriteFailure",
    "StoreSubscriptionFailure",
    "logger",
]
