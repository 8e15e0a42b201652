"""NiceGUI web UI for Mapty."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, cast

from nicegui import ui

from mapty.core.state import ExtraField
from mapty.geo.location import (
    BrowserLocationProvider,
    LocationProvider,
    StaticLocationProvider,
)
from mapty.geo.map_surface import LeafletMapSurface
from mapty.ui.controller import ActivityController
from mapty.ui.views import WorkoutView
from mapty.workout.model import Coords, WorkoutType
from mapty.workout.storage import JsonFileStore
from mapty.workout.validation import ValidationError

_TYPE_OPTIONS = {"running": "Running", "cycling": "Cycling"}


class WorkoutForm:
    def __init__(
        self,
        on_submit: Callable[[], None],
        on_cancel: Callable[[], None],
        on_type_change: Callable[[WorkoutType], None],
    ) -> None:
        with ui.card().classes("w-full mapty-card") as self.card:
            with ui.row().classes("w-full items-end gap-2"):
                self.type_select = ui.select(_TYPE_OPTIONS, value="running", label="Type")
                self.distance = ui.number("Distance (km)", min=0)
                self.duration = ui.number("Duration (min)", min=0)
                self.cadence = ui.number("Cadence (step/min)", min=0)
                self.elevation = ui.number("Elev gain (m)")
            with ui.row().classes("gap-2"):
                ui.button("OK", on_click=on_submit)
                ui.button("Cancel", on_click=on_cancel).props("flat")
        self.type_select.on_value_change(
            lambda e: on_type_change(cast(WorkoutType, e.value or "running"))
        )
        self.set_extra_field("cadence")
        self.card.set_visibility(False)

    @property
    def workout_type(self) -> str:
        return str(self.type_select.value or "running")

    @property
    def extra_value(self) -> object:
        if self.workout_type == "running":
            return self.cadence.value
        return self.elevation.value

    def show(self) -> None:
        self.card.set_visibility(True)
        self.distance.run_method("focus")

    def hide(self) -> None:
        for field in (self.distance, self.duration, self.cadence, self.elevation):
            field.value = None
        self.card.set_visibility(False)

    def set_extra_field(self, field: ExtraField) -> None:
        self.cadence.set_visibility(field == "cadence")
        self.elevation.set_visibility(field == "elevation")


class WorkoutList:
    def __init__(self, on_pick: Callable[[str], None]) -> None:
        self._on_pick = on_pick
        self.column = ui.column().classes("w-full gap-2")

    def render(self, view: WorkoutView) -> None:
        with self.column:
            with ui.card().classes(
                f"w-full cursor-pointer mapty-card workout--{view.workout_type}"
            ) as card:
                ui.label(view.title).classes("text-base font-semibold")
                with ui.row().classes("gap-4"):
                    for detail in view.details:
                        ui.label(f"{detail.icon} {detail.value} {detail.unit}").classes(
                            "text-sm"
                        )
        # Newest entries go on top, right under the form.
        card.move(target_index=0)
        card.on("click", lambda _e, workout_id=view.workout_id: self._on_pick(workout_id))

    def clear(self) -> None:
        self.column.clear()


def _location_provider(sim_location: Coords | None, sim_no_location: bool) -> LocationProvider:
    if sim_no_location:
        return StaticLocationProvider(None)
    if sim_location is not None:
        return StaticLocationProvider(sim_location)
    return BrowserLocationProvider()


def run_web_ui(
    *,
    host: str = "127.0.0.1",
    port: int = 8080,
    storage_path: Path | None = None,
    sim_location: Coords | None = None,
    sim_no_location: bool = False,
    debug: bool = False,
) -> int:
    store = JsonFileStore(storage_path)

    @ui.page("/")
    async def index() -> None:
        ui.add_head_html(
            """
            <style>
              .mapty-card { border-radius: 10px; }
              .workout--running { border-left: 5px solid #00c46a; }
              .workout--cycling { border-left: 5px solid #ffb545; }
              .running-popup .leaflet-popup-content-wrapper { border-left: 5px solid #00c46a; }
              .cycling-popup .leaflet-popup-content-wrapper { border-left: 5px solid #ffb545; }
            </style>
            """
        )
        controller: ActivityController | None = None

        def on_submit() -> None:
            assert controller is not None
            try:
                controller.create_workout(
                    form.workout_type,
                    form.distance.value,
                    form.duration.value,
                    form.extra_value,
                )
            except ValidationError as exc:
                ui.notify(str(exc), color="negative")

        def on_cancel() -> None:
            assert controller is not None
            controller.cancel_form()

        def on_type_change(workout_type: WorkoutType) -> None:
            assert controller is not None
            controller.select_workout_type(workout_type)

        def on_pick(workout_id: str) -> None:
            assert controller is not None
            controller.locate_workout(workout_id)

        async def on_reset() -> None:
            assert controller is not None
            await controller.reset()
            ui.notify("Workout history cleared", color="positive")

        with ui.row().classes("w-full h-[90vh] no-wrap gap-4"):
            with ui.column().classes("w-1/3 h-full gap-2 overflow-auto"):
                ui.label("MAPTY").classes("text-xl font-semibold tracking-wide")
                form = WorkoutForm(on_submit, on_cancel, on_type_change)
                workout_list = WorkoutList(on_pick)
                ui.button("Reset history", on_click=on_reset).props("outline color=negative")
            map_container = ui.column().classes("w-2/3 h-full")

        controller = ActivityController(
            location_provider=_location_provider(sim_location, sim_no_location),
            map_surface=LeafletMapSurface(map_container),
            store=store,
            list_view=workout_list,
            form_view=form,
            notify=lambda message: ui.notify(message, color="negative"),
            debug=debug,
        )

        await ui.context.client.connected()
        await controller.start()

    ui.run(host=host, port=port, reload=False, title="Mapty")
    return 0
