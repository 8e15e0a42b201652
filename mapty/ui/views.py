"""Presentation records for workout list items and map popups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never

from mapty.workout.model import Cycling, Running, Workout, WorkoutType

RUNNING_ICON = "🏃‍♂️"
CYCLING_ICON = "🚴"


@dataclass(frozen=True)
class WorkoutDetail:
    icon: str
    value: str
    unit: str


@dataclass(frozen=True)
class WorkoutView:
    workout_id: str
    workout_type: WorkoutType
    title: str
    details: tuple[WorkoutDetail, ...]


def _fmt_number(value: float, digits: int = 1) -> str:
    return f"{value:.{digits}f}"


def _fmt_raw(value: float) -> str:
    # Raw user inputs keep their own precision: 5.0 -> "5", 5.25 -> "5.25".
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return str(number)


def workout_icon(workout: Workout) -> str:
    if isinstance(workout, Running):
        return RUNNING_ICON
    if isinstance(workout, Cycling):
        return CYCLING_ICON
    assert_never(workout)


def popup_text(workout: Workout) -> str:
    return f"{workout_icon(workout)} {workout.description}"


def popup_class(workout: Workout) -> str:
    return f"{workout.type}-popup"


def render_workout(workout: Workout) -> WorkoutView:
    details = [
        WorkoutDetail(workout_icon(workout), _fmt_raw(workout.distance), "km"),
        WorkoutDetail("⏱", _fmt_raw(workout.duration), "min"),
    ]
    if isinstance(workout, Running):
        details.append(WorkoutDetail("⚡️", _fmt_number(workout.pace), "min/km"))
        details.append(WorkoutDetail("🦶🏼", _fmt_raw(workout.cadence), "spm"))
    elif isinstance(workout, Cycling):
        details.append(WorkoutDetail("⚡️", _fmt_number(workout.speed), "km/h"))
        details.append(WorkoutDetail("⛰", _fmt_raw(workout.elevation_gain), "m"))
    else:
        assert_never(workout)

    return WorkoutView(
        workout_id=workout.id,
        workout_type=workout.type,
        title=workout.description,
        details=tuple(details),
    )
