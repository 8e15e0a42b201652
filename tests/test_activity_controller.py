from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

import pytest

from mapty.core.state import AwaitingInput, ExtraField, Hidden
from mapty.geo.location import StaticLocationProvider
from mapty.ui.controller import LOCATION_UNAVAILABLE_MESSAGE, MAP_ZOOM_LEVEL, ActivityController
from mapty.ui.views import RUNNING_ICON, WorkoutView
from mapty.workout.model import Coords, Cycling, Running
from mapty.workout.snapshot import dump_snapshot
from mapty.workout.storage import STORAGE_KEY, JsonFileStore, KeyValueStore, MemoryStore
from mapty.workout.validation import ValidationError


class FakeMap:
    def __init__(self) -> None:
        self.initialized_at: list[tuple[Coords, int]] = []
        self.click_handlers: list[Callable[[Coords], None]] = []
        self.markers: list[tuple[Coords, str, str]] = []
        self.views: list[tuple[Coords, int, float]] = []
        self.cleared = 0

    async def initialize(self, center: Coords, zoom: int) -> None:
        self.initialized_at.append((center, zoom))

    def on_click(self, handler: Callable[[Coords], None]) -> None:
        self.click_handlers.append(handler)

    def add_marker(self, coords: Coords, popup_text: str, class_name: str) -> None:
        self.markers.append((coords, popup_text, class_name))

    def set_view(self, coords: Coords, zoom: int, duration_sec: float) -> None:
        self.views.append((coords, zoom, duration_sec))

    def clear_markers(self) -> None:
        self.markers.clear()
        self.cleared += 1

    def click(self, coords: Coords) -> None:
        for handler in self.click_handlers:
            handler(coords)


class FakeList:
    def __init__(self) -> None:
        self.rendered: list[WorkoutView] = []

    def render(self, view: WorkoutView) -> None:
        self.rendered.append(view)

    def clear(self) -> None:
        self.rendered.clear()


class FakeForm:
    def __init__(self) -> None:
        self.visible = False
        self.hide_calls = 0
        self.extra_field: ExtraField = "cadence"

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False
        self.hide_calls += 1

    def set_extra_field(self, field: ExtraField) -> None:
        self.extra_field = field


class StepClock:
    def __init__(self) -> None:
        self._now = datetime(2026, 4, 14, 8, 0)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


def _make_controller(
    *,
    store: KeyValueStore | None = None,
    location: Coords | None = (51.5, -0.1),
) -> tuple[ActivityController, FakeMap, FakeList, FakeForm, KeyValueStore, list[str]]:
    map_surface = FakeMap()
    list_view = FakeList()
    form = FakeForm()
    notices: list[str] = []
    store = store or MemoryStore()
    controller = ActivityController(
        location_provider=StaticLocationProvider(location),
        map_surface=map_surface,
        store=store,
        list_view=list_view,
        form_view=form,
        notify=notices.append,
        clock=StepClock(),
    )
    return controller, map_surface, list_view, form, store, notices


def _stored(store: KeyValueStore) -> list[dict[str, object]]:
    raw = store.get_item(STORAGE_KEY)
    assert raw is not None
    return json.loads(raw)


def test_click_then_submit_running_workout() -> None:
    controller, map_surface, list_view, form, store, _ = _make_controller()
    assert asyncio.run(controller.initialize()) is True
    assert map_surface.initialized_at == [((51.5, -0.1), MAP_ZOOM_LEVEL)]

    map_surface.click((51.5, -0.1))
    assert controller.form_state == AwaitingInput(location=(51.5, -0.1))
    assert form.visible

    workout = controller.create_workout("running", "5", "25", "150")

    assert isinstance(workout, Running)
    assert workout.pace == pytest.approx(5.0)
    assert workout.description.startswith("Running on")
    assert workout.coords == (51.5, -0.1)
    assert controller.workouts == (workout,)
    assert controller.form_state == Hidden()
    assert not form.visible
    assert map_surface.markers == [
        ((51.5, -0.1), f"{RUNNING_ICON} {workout.description}", "running-popup")
    ]
    assert [v.workout_id for v in list_view.rendered] == [workout.id]
    assert len(_stored(store)) == 1


def test_cycling_workout_uses_clicked_location() -> None:
    controller, map_surface, _, _, store, _ = _make_controller()
    asyncio.run(controller.initialize())

    map_surface.click((40.4, -3.7))
    workout = controller.create_workout("cycling", 27, 95, 0)

    assert isinstance(workout, Cycling)
    assert workout.coords == (40.4, -3.7)
    assert workout.elevation_gain == 0
    assert _stored(store)[0]["type"] == "cycling"


def test_invalid_submission_changes_nothing() -> None:
    controller, map_surface, list_view, form, store, _ = _make_controller()
    asyncio.run(controller.initialize())
    map_surface.click((51.5, -0.1))

    with pytest.raises(ValidationError):
        controller.create_workout("running", 0, 25, 150)

    assert controller.workouts == ()
    assert controller.form_state == AwaitingInput(location=(51.5, -0.1))
    assert form.visible
    assert map_surface.markers == []
    assert list_view.rendered == []
    assert store.get_item(STORAGE_KEY) is None


def test_create_while_hidden_is_refused() -> None:
    controller, _, _, _, store, _ = _make_controller()
    asyncio.run(controller.initialize())

    with pytest.raises(RuntimeError):
        controller.create_workout("running", 5, 25, 150)

    assert controller.workouts == ()
    assert store.get_item(STORAGE_KEY) is None


def test_cancel_hides_form() -> None:
    controller, map_surface, _, form, _, _ = _make_controller()
    asyncio.run(controller.initialize())
    map_surface.click((1.0, 2.0))

    controller.cancel_form()

    assert controller.form_state == Hidden()
    assert not form.visible
    assert form.hide_calls == 1


def test_select_workout_type_toggles_extra_field() -> None:
    controller, _, _, form, _, _ = _make_controller()

    assert controller.select_workout_type("cycling") == "elevation"
    assert form.extra_field == "elevation"
    assert controller.select_workout_type("running") == "cadence"
    assert form.extra_field == "cadence"
    assert controller.form_state == Hidden()


def test_restore_renders_list_without_markers_until_initialize() -> None:
    saved = [
        Running.create((51.5, -0.1), 5, 25, 150, at=datetime(2026, 4, 1, 7)),
        Cycling.create((51.6, -0.2), 30, 70, 200, at=datetime(2026, 4, 2, 7)),
    ]
    store = MemoryStore({STORAGE_KEY: dump_snapshot(saved)})
    controller, map_surface, list_view, _, _, _ = _make_controller(store=store)

    controller.restore()

    assert [v.workout_id for v in list_view.rendered] == [w.id for w in saved]
    assert [v.workout_type for v in list_view.rendered] == ["running", "cycling"]
    assert map_surface.markers == []

    asyncio.run(controller.initialize())

    assert [m[0] for m in map_surface.markers] == [(51.5, -0.1), (51.6, -0.2)]
    assert [m[2] for m in map_surface.markers] == ["running-popup", "cycling-popup"]


def test_persist_restore_round_trip() -> None:
    controller, map_surface, _, _, store, _ = _make_controller()
    asyncio.run(controller.initialize())
    map_surface.click((51.5, -0.1))
    controller.create_workout("running", 5, 25, 150)
    map_surface.click((51.6, -0.2))
    controller.create_workout("cycling", 27, 95, 40)
    before = controller.workouts

    restarted, _, list_view, _, _, _ = _make_controller(store=store)
    restarted.restore()

    after = restarted.workouts
    assert [(w.id, w.type, w.distance, w.duration) for w in after] == [
        (w.id, w.type, w.distance, w.duration) for w in before
    ]
    assert isinstance(after[0], Running) and isinstance(before[0], Running)
    assert after[0].pace == before[0].pace
    assert isinstance(after[1], Cycling) and isinstance(before[1], Cycling)
    assert after[1].speed == before[1].speed
    assert len(list_view.rendered) == 2


def test_restore_malformed_snapshot_starts_empty() -> None:
    store = MemoryStore({STORAGE_KEY: "{not json"})
    controller, _, list_view, _, _, notices = _make_controller(store=store)

    controller.restore()

    assert controller.workouts == ()
    assert list_view.rendered == []
    assert notices == []


def test_restore_without_snapshot_is_noop() -> None:
    controller, _, list_view, _, _, _ = _make_controller()

    controller.restore()

    assert controller.workouts == ()
    assert list_view.rendered == []


def test_locate_workout_moves_map() -> None:
    controller, map_surface, _, _, _, _ = _make_controller()
    asyncio.run(controller.initialize())
    map_surface.click((48.85, 2.35))
    workout = controller.create_workout("running", 10, 50, 170)

    assert controller.locate_workout(workout.id) is True
    assert map_surface.views == [((48.85, 2.35), MAP_ZOOM_LEVEL, 1.0)]


def test_locate_unknown_workout_is_silent_noop() -> None:
    controller, map_surface, _, _, store, _ = _make_controller()
    asyncio.run(controller.initialize())
    map_surface.click((48.85, 2.35))
    controller.create_workout("running", 10, 50, 170)
    snapshot_before = store.get_item(STORAGE_KEY)

    assert controller.locate_workout("0000000000") is False

    assert map_surface.views == []
    assert len(controller.workouts) == 1
    assert controller.form_state == Hidden()
    assert store.get_item(STORAGE_KEY) == snapshot_before


def test_location_unavailable_leaves_map_uninitialized() -> None:
    controller, map_surface, _, _, _, notices = _make_controller(location=None)

    assert asyncio.run(controller.initialize()) is False

    assert notices == [LOCATION_UNAVAILABLE_MESSAGE]
    assert map_surface.initialized_at == []
    assert map_surface.click_handlers == []
    assert not controller.map_ready


def test_reinitialize_registers_click_handler_once() -> None:
    controller, map_surface, _, _, _, _ = _make_controller()

    asyncio.run(controller.initialize())
    asyncio.run(controller.initialize())

    assert len(map_surface.initialized_at) == 2
    assert len(map_surface.click_handlers) == 1


def test_reset_clears_history_and_restarts() -> None:
    controller, map_surface, list_view, form, store, _ = _make_controller()
    asyncio.run(controller.start())
    map_surface.click((51.5, -0.1))
    controller.create_workout("running", 5, 25, 150)
    map_surface.click((51.5, -0.1))

    assert asyncio.run(controller.reset()) is True

    assert controller.workouts == ()
    assert store.get_item(STORAGE_KEY) is None
    assert list_view.rendered == []
    assert map_surface.markers == []
    assert map_surface.cleared == 1
    assert controller.form_state == Hidden()
    assert not form.visible
    assert controller.map_ready


def test_start_with_undecodable_storage_file_begins_empty(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_bytes(b'{"workouts": "\xff\xfe"}')
    controller, map_surface, list_view, _, _, notices = _make_controller(
        store=JsonFileStore(path)
    )

    assert asyncio.run(controller.start()) is True

    assert controller.workouts == ()
    assert list_view.rendered == []
    assert notices == []
    assert controller.map_ready
    assert map_surface.click_handlers


def test_restore_skips_snapshot_with_non_finite_values() -> None:
    saved = [Running.create((51.5, -0.1), 5, 25, 150, at=datetime(2026, 4, 1, 7))]
    raw = dump_snapshot(saved).replace('"distance": 5', '"distance": NaN')
    store = MemoryStore({STORAGE_KEY: raw})
    controller, _, list_view, _, _, _ = _make_controller(store=store)

    controller.restore()

    assert controller.workouts == ()
    assert list_view.rendered == []
