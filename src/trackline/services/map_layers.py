"""In-memory map surface serialized for a client-side map library."""

from typing import Dict, List, Optional, Sequence, Tuple

LatLng = Tuple[float, float]


class MapLayers:
    """Map surface keeping its layers and view as plain data.

    The web UI renders `to_dict()` with its map library (polyline, marker,
    bounds or center/zoom).
    """

    def __init__(self) -> None:
        self._layers: Dict[int, dict] = {}
        self._next_handle = 1
        self.view: Optional[dict] = None

    def draw_path(self, points: Sequence[LatLng]) -> int:
        return self._add({"type": "polyline", "points": [list(p) for p in points]})

    def draw_marker(self, point: LatLng, label: str) -> int:
        return self._add({"type": "marker", "point": list(point), "label": label})

    def remove_layer(self, handle: int) -> None:
        self._layers.pop(handle, None)

    def fit_bounds(self, handle: int) -> None:
        layer = self._layers.get(handle)
        if layer is None:
            return
        points = layer["points"] if layer["type"] == "polyline" else [layer["point"]]
        lats = [p[0] for p in points]
        lngs = [p[1] for p in points]
        self.view = {"bounds": [[min(lats), min(lngs)], [max(lats), max(lngs)]]}

    def reset_view(self, center: LatLng, zoom: int) -> None:
        self.view = {"center": list(center), "zoom": zoom}

    @property
    def layers(self) -> List[dict]:
        return [dict(layer, handle=handle) for handle, layer in sorted(self._layers.items())]

    def to_dict(self) -> dict:
        return {"layers": self.layers, "view": self.view}

    def _add(self, layer: dict) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._layers[handle] = layer
        return handle
