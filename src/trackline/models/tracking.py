"""Model for the live tracking state."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TrackingState(str, Enum):
    """State of the tracking controller."""
    IDLE = "idle"
    REQUESTING_PERMISSION = "requesting_permission"
    TRACKING = "tracking"
    ERROR = "error"


_LABELS = {
    TrackingState.IDLE: "Idle",
    TrackingState.REQUESTING_PERMISSION: "Requesting permission...",
    TrackingState.TRACKING: "Tracking...",
    TrackingState.ERROR: "Error",
}


@dataclass(frozen=True)
class TrackingStatus:
    """Tracking state with the surfaced error message."""

    state: TrackingState
    error: Optional[str] = None

    @property
    def label(self) -> str:
        return _LABELS[self.state]

    @property
    def is_tracking(self) -> bool:
        return self.state == TrackingState.TRACKING

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "label": self.label,
            "error": self.error,
            "is_tracking": self.is_tracking,
        }
