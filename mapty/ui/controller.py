"""Activity controller: workout list, entry form, map and persistence."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol, assert_never

from mapty.core.state import (
    AwaitingInput,
    ExtraField,
    FormState,
    Hidden,
    extra_field_for,
)
from mapty.geo.location import LocationProvider, LocationUnavailable
from mapty.geo.map_surface import MapSurface
from mapty.ui.views import WorkoutView, popup_class, popup_text, render_workout
from mapty.workout.model import Coords, Cycling, Running, Workout, WorkoutType
from mapty.workout.snapshot import MalformedPersistedState, dump_snapshot, load_snapshot
from mapty.workout.storage import STORAGE_KEY, KeyValueStore
from mapty.workout.validation import validate_workout_input

MAP_ZOOM_LEVEL = 13
SET_VIEW_DURATION_SEC = 1.0
LOCATION_UNAVAILABLE_MESSAGE = "Could not get your position."


class WorkoutListView(Protocol):
    def render(self, view: WorkoutView) -> None: ...

    def clear(self) -> None: ...


class FormView(Protocol):
    def show(self) -> None: ...

    def hide(self) -> None: ...

    def set_extra_field(self, field: ExtraField) -> None: ...


class ActivityController:
    def __init__(
        self,
        *,
        location_provider: LocationProvider,
        map_surface: MapSurface,
        store: KeyValueStore,
        list_view: WorkoutListView,
        form_view: FormView | None = None,
        notify: Callable[[str], None] | None = None,
        zoom_level: int = MAP_ZOOM_LEVEL,
        storage_key: str = STORAGE_KEY,
        clock: Callable[[], datetime] = datetime.now,
        debug: bool = False,
    ) -> None:
        self._location_provider = location_provider
        self._map = map_surface
        self._store = store
        self._list_view = list_view
        self._form_view = form_view
        self._notify = notify
        self._zoom_level = zoom_level
        self._storage_key = storage_key
        self._clock = clock
        self._debug = debug

        self._workouts: list[Workout] = []
        self._form_state: FormState = Hidden()
        self._extra_field: ExtraField = "cadence"
        self._map_ready = False
        self._click_registered = False

    @property
    def workouts(self) -> tuple[Workout, ...]:
        return tuple(self._workouts)

    @property
    def form_state(self) -> FormState:
        return self._form_state

    @property
    def extra_field(self) -> ExtraField:
        return self._extra_field

    @property
    def map_ready(self) -> bool:
        return self._map_ready

    async def start(self) -> bool:
        self.restore()
        return await self.initialize()

    async def initialize(self) -> bool:
        try:
            coords = await self._location_provider.locate()
        except LocationUnavailable as exc:
            self._log("LOCATION", f"unavailable: {exc}")
            if self._notify is not None:
                self._notify(LOCATION_UNAVAILABLE_MESSAGE)
            return False

        self._log("LOCATION", f"current position {coords[0]:.5f},{coords[1]:.5f}")
        await self._map.initialize(coords, self._zoom_level)
        if not self._click_registered:
            self._map.on_click(self.show_form)
            self._click_registered = True
        self._map_ready = True

        for workout in self._workouts:
            self._render_marker(workout)
        return True

    def show_form(self, location: Coords) -> None:
        self._form_state = AwaitingInput(location=location)
        self._log("FORM", f"awaiting input at {location[0]:.5f},{location[1]:.5f}")
        if self._form_view is not None:
            self._form_view.show()

    def cancel_form(self) -> None:
        self._hide_form()

    def select_workout_type(self, workout_type: WorkoutType) -> ExtraField:
        self._extra_field = extra_field_for(workout_type)
        if self._form_view is not None:
            self._form_view.set_extra_field(self._extra_field)
        return self._extra_field

    def create_workout(
        self,
        workout_type: str,
        distance_raw: object,
        duration_raw: object,
        extra_raw: object,
    ) -> Workout:
        state = self._form_state
        if not isinstance(state, AwaitingInput):
            raise RuntimeError("Workout form is not open")

        values = validate_workout_input(workout_type, distance_raw, duration_raw, extra_raw)

        workout: Workout
        now = self._clock()
        if values.workout_type == "running":
            workout = Running.create(
                state.location, values.distance, values.duration, values.extra, at=now
            )
        elif values.workout_type == "cycling":
            workout = Cycling.create(
                state.location, values.distance, values.duration, values.extra, at=now
            )
        else:
            assert_never(values.workout_type)

        self._workouts.append(workout)
        self._hide_form()
        if self._map_ready:
            self._render_marker(workout)
        self._list_view.render(self.render_workout(workout))
        self.persist()
        return workout

    def render_workout(self, workout: Workout) -> WorkoutView:
        return render_workout(workout)

    def locate_workout(self, workout_id: str) -> bool:
        workout = next((w for w in self._workouts if w.id == workout_id), None)
        if workout is None or not self._map_ready:
            return False
        self._map.set_view(workout.coords, self._zoom_level, SET_VIEW_DURATION_SEC)
        return True

    def persist(self) -> None:
        self._store.set_item(self._storage_key, dump_snapshot(self._workouts))
        self._log("STORE", f"saved {len(self._workouts)} workout(s)")

    def restore(self) -> None:
        raw = self._store.get_item(self._storage_key)
        if raw is None:
            return
        try:
            restored = load_snapshot(raw)
        except MalformedPersistedState as exc:
            self._log("STORE", f"ignoring stored workouts: {exc}")
            return

        self._workouts = restored
        for workout in self._workouts:
            self._list_view.render(self.render_workout(workout))
        self._log("STORE", f"restored {len(self._workouts)} workout(s)")

    async def reset(self) -> bool:
        self._store.remove_item(self._storage_key)
        self._workouts = []
        self._list_view.clear()
        self._map.clear_markers()
        self._hide_form()
        self._log("STORE", "cleared stored workouts")
        return await self.start()

    def _hide_form(self) -> None:
        self._form_state = Hidden()
        if self._form_view is not None:
            self._form_view.hide()

    def _render_marker(self, workout: Workout) -> None:
        self._map.add_marker(workout.coords, popup_text(workout), popup_class(workout))

    def _log(self, tag: str, message: str) -> None:
        if self._debug:
            print(f"[{tag}] {message}")
