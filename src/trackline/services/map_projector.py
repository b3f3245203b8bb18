"""Drawing the filtered path onto a map."""

from datetime import tzinfo
from typing import Any, Optional, Protocol, Sequence, Tuple

from trackline.core.logger import log_call, log_result
from trackline.models.location import LocationRecord
from trackline.services.window_filter import to_local

LatLng = Tuple[float, float]
WORLD_CENTER: LatLng = (0.0, 0.0)
WORLD_ZOOM = 2


class MapSurface(Protocol):
    """Map capability."""

    def draw_path(self, points: Sequence[LatLng]) -> Any:
        ...

    def draw_marker(self, point: LatLng, label: str) -> Any:
        ...

    def remove_layer(self, handle: Any) -> None:
        ...

    def fit_bounds(self, handle: Any) -> None:
        ...

    def reset_view(self, center: LatLng, zoom: int) -> None:
        ...


class MapProjector:
    """Draws a polyline through the records and a marker at the last one."""

    def __init__(
        self,
        surface: MapSurface,
        world_center: LatLng = WORLD_CENTER,
        world_zoom: int = WORLD_ZOOM,
        tz: Optional[tzinfo] = None,
    ):
        self.surface = surface
        self.world_center = world_center
        self.world_zoom = world_zoom
        self.tz = tz
        self._path: Any = None
        self._marker: Any = None

    def render(self, records: Sequence[LocationRecord]) -> None:
        """Redraws the map for the given records.

        Layers from the previous render are removed first. An empty sequence
        resets the view to the world overview.
        """
        log_call("MapProjector", "render", points=len(records))
        self._clear()

        if not records:
            self.surface.reset_view(self.world_center, self.world_zoom)
            log_result("MapProjector", "render", "world view")
            return

        points = [(r.latitude, r.longitude) for r in records]
        self._path = self.surface.draw_path(points)
        self.surface.fit_bounds(self._path)

        last = records[-1]
        self._marker = self.surface.draw_marker(points[-1], self.marker_label(last))
        log_result("MapProjector", "render", f"{len(points)} points")

    def marker_label(self, record: LocationRecord) -> str:
        local = to_local(record.timestamp, self.tz)
        return f"Last known location: {local.strftime('%H:%M:%S')}"

    def _clear(self) -> None:
        if self._path is not None:
            self.surface.remove_layer(self._path)
            self._path = None
        if self._marker is not None:
            self.surface.remove_layer(self._marker)
            self._marker = None
