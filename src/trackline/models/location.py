"""Models for locations, position samples and stored records."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class GPSCoordinates:
    """GPS coordinates."""

    latitude: float
    longitude: float

    @property
    def is_valid(self) -> bool:
        """Latitude in [-90, 90] and longitude in [-180, 180]."""
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0

    def __str__(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"

    def distance_to(self, other: "GPSCoordinates") -> float:
        """Calculate distance to other coordinates in km (haversine formula).

        Args:
            other: Target GPS coordinates

        Returns:
            Distance in kilometers
        """
        R = 6371  # Earth's radius in km

        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        dlat = math.radians(other.latitude - self.latitude)
        dlng = math.radians(other.longitude - self.longitude)

        a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return R * c


@dataclass(frozen=True)
class PositionOptions:
    """Options of a single position request."""

    high_accuracy: bool = True
    timeout_ms: int = 5000
    max_cached_age_ms: int = 0  # 0 = always a fresh fix


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


@dataclass(frozen=True)
class PositionSample:
    """One raw positioning reading before it becomes a stored record."""

    latitude: float
    longitude: float
    accuracy: Optional[float] = None  # meters
    altitude: Optional[float] = None  # meters

    @property
    def coordinates(self) -> GPSCoordinates:
        return GPSCoordinates(latitude=self.latitude, longitude=self.longitude)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PositionSample":
        """Builds a sample from a coords mapping.

        Missing accuracy/altitude stay absent (None), they never default to zero.

        Raises:
            KeyError: If latitude or longitude is missing
            ValueError: If a value is not numeric
        """
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            accuracy=_optional_float(data.get("accuracy")),
            altitude=_optional_float(data.get("altitude")),
        )


@dataclass(frozen=True)
class NewLocation:
    """Client-side part of a location record, handed to the store's append."""

    latitude: float
    longitude: float
    tracker_id: str
    accuracy: Optional[float] = None
    altitude: Optional[float] = None

    @classmethod
    def from_sample(cls, sample: PositionSample, tracker_id: str) -> "NewLocation":
        return cls(
            latitude=sample.latitude,
            longitude=sample.longitude,
            tracker_id=tracker_id,
            accuracy=sample.accuracy,
            altitude=sample.altitude,
        )


@dataclass(frozen=True)
class LocationRecord:
    """Stored location record.

    The store assigns `id` and `timestamp` (moment of receipt, never the
    client clock). Records are immutable once created.
    """

    id: str
    timestamp: datetime
    latitude: float
    longitude: float
    tracker_id: str
    accuracy: Optional[float] = None
    altitude: Optional[float] = None

    @property
    def coordinates(self) -> GPSCoordinates:
        return GPSCoordinates(latitude=self.latitude, longitude=self.longitude)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "altitude": self.altitude,
            "trackerId": self.tracker_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocationRecord":
        """
        Raises:
            KeyError: If a required field is missing
            ValueError: If a value is malformed or the timestamp has no offset
        """
        timestamp = datetime.fromisoformat(data["timestamp"])
        if timestamp.tzinfo is None:
            raise ValueError(f"Timestamp without UTC offset: {data['timestamp']}")
        return cls(
            id=str(data["id"]),
            timestamp=timestamp,
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            tracker_id=str(data.get("trackerId", "")),
            accuracy=_optional_float(data.get("accuracy")),
            altitude=_optional_float(data.get("altitude")),
        )
