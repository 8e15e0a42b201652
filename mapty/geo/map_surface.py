"""Interactive map surface backed by NiceGUI's Leaflet element."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from nicegui import events, ui

from mapty.workout.model import Coords

ClickHandler = Callable[[Coords], None]


@dataclass(frozen=True)
class MarkerPopupOptions:
    max_width: int = 250
    min_width: int = 100
    auto_close: bool = False
    close_on_click: bool = False

    def as_leaflet(self, class_name: str) -> dict[str, Any]:
        return {
            "maxWidth": self.max_width,
            "minWidth": self.min_width,
            "autoClose": self.auto_close,
            "closeOnClick": self.close_on_click,
            "className": class_name,
        }


class MapSurface(Protocol):
    async def initialize(self, center: Coords, zoom: int) -> None: ...

    def on_click(self, handler: ClickHandler) -> None: ...

    def add_marker(self, coords: Coords, popup_text: str, class_name: str) -> None: ...

    def set_view(self, coords: Coords, zoom: int, duration_sec: float) -> None: ...

    def clear_markers(self) -> None: ...


class LeafletMapSurface:
    def __init__(
        self,
        container: ui.element,
        popup_options: MarkerPopupOptions | None = None,
    ) -> None:
        self._container = container
        self._popup_options = popup_options or MarkerPopupOptions()
        self._map: ui.leaflet | None = None
        self._markers: list[Any] = []

    async def initialize(self, center: Coords, zoom: int) -> None:
        if self._map is not None:
            self._map.set_center(center)
            self._map.set_zoom(zoom)
            return
        with self._container:
            # ui.leaflet brings its own OpenStreetMap tile layer.
            self._map = ui.leaflet(center=center, zoom=zoom).classes("w-full h-full")
        await self._map.initialized()

    def on_click(self, handler: ClickHandler) -> None:
        def _on_map_click(e: events.GenericEventArguments) -> None:
            latlng = e.args["latlng"]
            handler((float(latlng["lat"]), float(latlng["lng"])))

        self._require_map().on("map-click", _on_map_click)

    def add_marker(self, coords: Coords, popup_text: str, class_name: str) -> None:
        marker = self._require_map().marker(latlng=coords)
        marker.run_method("bindPopup", popup_text, self._popup_options.as_leaflet(class_name))
        marker.run_method("openPopup")
        self._markers.append(marker)

    def set_view(self, coords: Coords, zoom: int, duration_sec: float) -> None:
        self._require_map().run_map_method(
            "setView",
            [coords[0], coords[1]],
            zoom,
            {"animate": True, "pan": {"duration": duration_sec}},
        )

    def clear_markers(self) -> None:
        if self._map is None:
            return
        for marker in self._markers:
            self._map.remove_layer(marker)
        self._markers.clear()

    def _require_map(self) -> ui.leaflet:
        if self._map is None:
            raise RuntimeError("Map surface is not initialized")
        return self._map
