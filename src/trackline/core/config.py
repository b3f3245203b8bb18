"""Configuration for Trackline."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from trackline.models.location import PositionOptions


@dataclass
class Config:
    """Configuration of a tracking server."""

    # Working directory with the location store
    data_dir: Path

    # Identifier written as tracker id into every record
    operator_id: str = "operator"

    # Shared secret for operator sign-in (None = sign-in disabled)
    operator_token: Optional[str] = None

    # Period of the repeating position request (seconds)
    sample_period: float = 60.0

    # Position request options
    high_accuracy: bool = True
    timeout_ms: int = 5000
    max_cached_age_ms: int = 0

    # Viewer-only deployments run without positioning
    positioning_enabled: bool = True

    # Zoom used for the world overview when nothing matches
    world_zoom: int = 2

    # IANA timezone for day/time filtering (None = system local time)
    timezone: Optional[str] = None

    # Verbose mode
    verbose: bool = False

    @property
    def store_file(self) -> Path:
        return self.data_dir / "tracked_locations.json"

    def ensure_dirs(self) -> None:
        """Creates the working directory."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def position_options(self) -> PositionOptions:
        return PositionOptions(
            high_accuracy=self.high_accuracy,
            timeout_ms=self.timeout_ms,
            max_cached_age_ms=self.max_cached_age_ms,
        )

    def tzinfo(self) -> Optional[ZoneInfo]:
        """Resolves the configured timezone.

        Raises:
            ValueError: If the timezone name is unknown on this system
        """
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (KeyError, ValueError) as e:  # ZoneInfoNotFoundError is a KeyError
            raise ValueError(f"Invalid timezone: {self.timezone!r}") from e
