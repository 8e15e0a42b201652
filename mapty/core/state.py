"""Form visibility state for the workout entry form."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union, assert_never

from mapty.workout.model import Coords, WorkoutType

ExtraField = Literal["cadence", "elevation"]


@dataclass(frozen=True)
class Hidden:
    pass


@dataclass(frozen=True)
class AwaitingInput:
    location: Coords


FormState = Union[Hidden, AwaitingInput]


def extra_field_for(workout_type: WorkoutType) -> ExtraField:
    if workout_type == "running":
        return "cadence"
    if workout_type == "cycling":
        return "elevation"
    assert_never(workout_type)
