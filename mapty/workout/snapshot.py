"""Snapshot codec for the persisted workout list.

A snapshot is a JSON array of flat records, one per workout, in creation
order. Derived values (pace, speed) and descriptions are stored as they were
computed at creation and are read back verbatim, never recomputed.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from typing import Any, assert_never

from mapty.workout.model import Cycling, Running, Workout


class MalformedPersistedState(ValueError):
    """Raised when a stored snapshot cannot be turned back into workouts."""


def workout_to_record(workout: Workout) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": workout.id,
        "date": workout.date.isoformat(),
        "coords": [workout.coords[0], workout.coords[1]],
        "distance": workout.distance,
        "duration": workout.duration,
        "type": workout.type,
        "description": workout.description,
    }
    if isinstance(workout, Running):
        record["cadence"] = workout.cadence
        record["pace"] = workout.pace
    elif isinstance(workout, Cycling):
        record["elevation_gain"] = workout.elevation_gain
        record["speed"] = workout.speed
    else:
        assert_never(workout)
    return record


def workout_from_record(record: object, index: int = 0) -> Workout:
    if not isinstance(record, dict):
        raise MalformedPersistedState(f"Record {index + 1}: must be an object")

    workout_type = record.get("type")
    common = {
        "id": _require_str(record, "id", index),
        "date": _parse_date(record.get("date"), index),
        "coords": _parse_coords(record.get("coords"), index),
        "distance": _require_number(record, "distance", index),
        "duration": _require_number(record, "duration", index),
        "description": _require_str(record, "description", index),
    }
    if workout_type == "running":
        return Running(
            **common,
            cadence=_require_number(record, "cadence", index),
            pace=_require_number(record, "pace", index),
        )
    if workout_type == "cycling":
        return Cycling(
            **common,
            elevation_gain=_require_number(record, "elevation_gain", index),
            speed=_require_number(record, "speed", index),
        )
    raise MalformedPersistedState(f"Record {index + 1}: unknown type {workout_type!r}")


def dump_snapshot(workouts: list[Workout] | tuple[Workout, ...]) -> str:
    return json.dumps([workout_to_record(w) for w in workouts], ensure_ascii=True)


def load_snapshot(raw: str) -> list[Workout]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedPersistedState(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise MalformedPersistedState("Snapshot must be an array")
    return [workout_from_record(item, i) for i, item in enumerate(data)]


def _require_str(record: dict[str, Any], field_name: str, index: int) -> str:
    value = record.get(field_name)
    if not isinstance(value, str) or not value:
        raise MalformedPersistedState(f"Record {index + 1}: invalid {field_name}")
    return value


def _require_number(record: dict[str, Any], field_name: str, index: int) -> float:
    value = record.get(field_name)
    if not _is_finite_number(value):
        raise MalformedPersistedState(f"Record {index + 1}: invalid {field_name}")
    return float(value)


def _parse_date(raw: object, index: int) -> datetime:
    if not isinstance(raw, str):
        raise MalformedPersistedState(f"Record {index + 1}: invalid date")
    try:
        return datetime.fromisoformat(raw)
    except ValueError as exc:
        raise MalformedPersistedState(f"Record {index + 1}: invalid date") from exc


def _parse_coords(raw: object, index: int) -> tuple[float, float]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise MalformedPersistedState(f"Record {index + 1}: invalid coords")
    lat, lng = raw
    for value in (lat, lng):
        if not _is_finite_number(value):
            raise MalformedPersistedState(f"Record {index + 1}: invalid coords")
    return (float(lat), float(lng))


def _is_finite_number(value: object) -> bool:
    # json.loads accepts NaN and Infinity literals.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
