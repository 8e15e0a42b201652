"""Form input coercion and validation for new workouts."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import cast

from mapty.workout.model import WORKOUT_TYPES, WorkoutType

INVALID_INPUT_MESSAGE = "Inputs have to be positive numbers!"


class ValidationError(ValueError):
    """Raised when submitted workout values are not usable."""


@dataclass(frozen=True)
class WorkoutInput:
    workout_type: WorkoutType
    distance: float
    duration: float
    extra: float


def to_number(raw: object) -> float:
    """Convert a raw form value to a float, NaN when it does not parse.

    Blank strings count as zero, like an empty numeric input field.
    """
    if raw is None or isinstance(raw, bool):
        return math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if text == "":
        return 0.0
    # Number("1_000") is NaN, while Number("0x10") is 16.
    if "_" in text:
        return math.nan
    try:
        if text[:2].lower() in ("0x", "0o", "0b"):
            return float(int(text, 0))
        return float(text)
    except ValueError:
        return math.nan


def _all_finite(*values: float) -> bool:
    return all(math.isfinite(value) for value in values)


def _all_positive(*values: float) -> bool:
    return all(value > 0 for value in values)


def validate_workout_input(
    workout_type: str,
    distance_raw: object,
    duration_raw: object,
    extra_raw: object,
) -> WorkoutInput:
    if workout_type not in WORKOUT_TYPES:
        raise ValidationError(f"Unknown workout type '{workout_type}'")

    distance = to_number(distance_raw)
    duration = to_number(duration_raw)
    extra = to_number(extra_raw)

    if not _all_finite(distance, duration, extra):
        raise ValidationError(INVALID_INPUT_MESSAGE)

    if not _all_positive(distance, duration):
        raise ValidationError(INVALID_INPUT_MESSAGE)
    # Cadence must be > 0; elevation gain may be zero.
    if workout_type == "running" and extra <= 0:
        raise ValidationError(INVALID_INPUT_MESSAGE)
    if workout_type == "cycling" and extra < 0:
        raise ValidationError(INVALID_INPUT_MESSAGE)

    return WorkoutInput(
        workout_type=cast(WorkoutType, workout_type),
        distance=distance,
        duration=duration,
        extra=extra,
    )
