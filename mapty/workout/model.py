"""Workout domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Literal, Union

WorkoutType = Literal["running", "cycling"]
Coords = tuple[float, float]

WORKOUT_TYPES: tuple[WorkoutType, ...] = ("running", "cycling")

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def workout_id_for(moment: datetime) -> str:
    millis = int(moment.timestamp() * 1000)
    return str(millis)[-10:]


def describe(workout_type: WorkoutType, moment: datetime) -> str:
    return f"{workout_type.capitalize()} on {_MONTHS[moment.month - 1]} {moment.day}"


@dataclass(frozen=True)
class BaseWorkout:
    id: str
    date: datetime
    coords: Coords
    distance: float
    duration: float
    description: str


@dataclass(frozen=True)
class Running(BaseWorkout):
    cadence: float
    pace: float

    type: ClassVar[Literal["running"]] = "running"

    @classmethod
    def create(
        cls,
        coords: Coords,
        distance: float,
        duration: float,
        cadence: float,
        *,
        at: datetime | None = None,
    ) -> Running:
        moment = at or datetime.now()
        return cls(
            id=workout_id_for(moment),
            date=moment,
            coords=(float(coords[0]), float(coords[1])),
            distance=distance,
            duration=duration,
            description=describe(cls.type, moment),
            cadence=cadence,
            pace=duration / distance,
        )


@dataclass(frozen=True)
class Cycling(BaseWorkout):
    elevation_gain: float
    speed: float

    type: ClassVar[Literal["cycling"]] = "cycling"

    @classmethod
    def create(
        cls,
        coords: Coords,
        distance: float,
        duration: float,
        elevation_gain: float,
        *,
        at: datetime | None = None,
    ) -> Cycling:
        moment = at or datetime.now()
        return cls(
            id=workout_id_for(moment),
            date=moment,
            coords=(float(coords[0]), float(coords[1])),
            distance=distance,
            duration=duration,
            description=describe(cls.type, moment),
            elevation_gain=elevation_gain,
            speed=distance / (duration / 60),
        )


Workout = Union[Running, Cycling]
