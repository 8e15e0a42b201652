"""One-shot device location providers."""

from __future__ import annotations

from typing import Protocol

from nicegui import ui

from mapty.workout.model import Coords

LOCATE_TIMEOUT_SEC = 30.0

_GEOLOCATION_JS = """
new Promise((resolve) => {
  if (!navigator.geolocation) {
    resolve(null);
    return;
  }
  navigator.geolocation.getCurrentPosition(
    (position) => resolve([position.coords.latitude, position.coords.longitude]),
    () => resolve(null),
    { timeout: %d }
  );
})
"""


class LocationUnavailable(RuntimeError):
    """Raised when the current position cannot be determined."""


class LocationProvider(Protocol):
    async def locate(self) -> Coords: ...


class StaticLocationProvider:
    """Fixed position, or a forced failure when no coordinates are given."""

    def __init__(self, coords: Coords | None = None) -> None:
        self._coords = coords

    async def locate(self) -> Coords:
        if self._coords is None:
            raise LocationUnavailable("No simulated location configured")
        return self._coords


class BrowserLocationProvider:
    """Ask the connected browser for its geolocation."""

    def __init__(self, timeout_sec: float = LOCATE_TIMEOUT_SEC) -> None:
        self._timeout_sec = timeout_sec

    async def locate(self) -> Coords:
        code = _GEOLOCATION_JS % int(self._timeout_sec * 1000)
        try:
            result = await ui.run_javascript(code, timeout=self._timeout_sec + 1.0)
        except TimeoutError as exc:
            raise LocationUnavailable("Browser did not answer the location request") from exc
        return parse_coords(result)


def parse_coords(raw: object) -> Coords:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise LocationUnavailable("Location request was denied or failed")
    try:
        lat, lng = float(raw[0]), float(raw[1])
    except (TypeError, ValueError) as exc:
        raise LocationUnavailable(f"Invalid coordinates: {raw!r}") from exc
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise LocationUnavailable(f"Coordinates out of range: {raw!r}")
    return (lat, lng)


def parse_location_arg(text: str) -> Coords:
    """Parse a ``LAT,LNG`` command line value."""
    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 2:
        raise ValueError("Location must be given as LAT,LNG")
    try:
        return parse_coords([float(parts[0]), float(parts[1])])
    except LocationUnavailable as exc:
        raise ValueError(str(exc)) from exc
