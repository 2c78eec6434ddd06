"""Workout taxonomy, weekly schedule, exercise catalogue and yearly targets.

All tables here are read-only after import.
"""

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class WorkoutType(str, Enum):
    """Fixed set of workout types."""

    CHEST_TRICEPS = "chest_triceps"
    SHOULDERS_BICEPS = "shoulders_biceps"
    VOLUME = "volume"
    CARDIO = "cardio"
    ACTIVE_REST = "active_rest"


REST_DAY = "rest"

WORKOUT_TYPE_LABELS: Mapping[WorkoutType, str] = MappingProxyType({
    WorkoutType.CHEST_TRICEPS: "Chest & Triceps",
    WorkoutType.SHOULDERS_BICEPS: "Shoulders & Biceps",
    WorkoutType.VOLUME: "Volume Day",
    WorkoutType.CARDIO: "Cardio",
    WorkoutType.ACTIVE_REST: "Active Rest",
})

# Keyed by date.weekday(): Monday=0 .. Sunday=6
WEEKLY_SCHEDULE: Mapping[int, WorkoutType | str] = MappingProxyType({
    0: WorkoutType.CHEST_TRICEPS,
    1: WorkoutType.CARDIO,
    2: WorkoutType.SHOULDERS_BICEPS,
    3: WorkoutType.CARDIO,
    4: WorkoutType.VOLUME,
    5: WorkoutType.ACTIVE_REST,
    6: REST_DAY,  # weekly review day
})

# Strength sessions imported on a scheduled rest day
REST_DAY_DEFAULT_WORKOUT = WorkoutType.VOLUME

# Third-party (Apple Health style) activity names, lowercased
ACTIVITY_NAME_MAP: Mapping[str, WorkoutType] = MappingProxyType({
    "running": WorkoutType.CARDIO,
    "indoor running": WorkoutType.CARDIO,
    "outdoor running": WorkoutType.CARDIO,
    "cycling": WorkoutType.CARDIO,
    "indoor cycling": WorkoutType.CARDIO,
    "elliptical": WorkoutType.CARDIO,
    "rowing": WorkoutType.CARDIO,
    "swimming": WorkoutType.CARDIO,
    "stair climbing": WorkoutType.CARDIO,
    "stair stepper": WorkoutType.CARDIO,
    "high intensity interval training": WorkoutType.CARDIO,
    "hiit": WorkoutType.CARDIO,
    "jump rope": WorkoutType.CARDIO,
    "hiking": WorkoutType.CARDIO,
    "cardio dance": WorkoutType.CARDIO,
    "mixed cardio": WorkoutType.CARDIO,
    "walking": WorkoutType.ACTIVE_REST,
    "outdoor walk": WorkoutType.ACTIVE_REST,
    "indoor walk": WorkoutType.ACTIVE_REST,
    "yoga": WorkoutType.ACTIVE_REST,
    "pilates": WorkoutType.ACTIVE_REST,
    "flexibility": WorkoutType.ACTIVE_REST,
    "cooldown": WorkoutType.ACTIVE_REST,
    "mind and body": WorkoutType.ACTIVE_REST,
})


@dataclass(frozen=True)
class ExerciseDefinition:
    """Catalogue entry for a tracked lift."""

    id: str
    name: str
    category: str  # chest, triceps, shoulders, biceps, compound
    default_sets: int
    default_reps: int
    start_weight: Optional[int] = None  # lbs at the start of the year
    target_weight: Optional[int] = None  # lbs year-end goal


_EXERCISE_LIST = (
    # Chest
    ExerciseDefinition("flat_db_press", "Flat Dumbbell Press", "chest", 4, 10, 45, 65),
    ExerciseDefinition("incline_db_press", "Incline Dumbbell Press", "chest", 4, 10, 35, 55),
    ExerciseDefinition("cable_flyes", "Cable Flyes", "chest", 3, 12, 20, 30),
    # Triceps
    ExerciseDefinition("skull_crushers", "Skull Crushers", "triceps", 3, 12, 25, 40),
    ExerciseDefinition("tricep_pushdowns", "Tricep Pushdowns", "triceps", 3, 12, 35, 50),
    ExerciseDefinition("overhead_tricep", "Overhead Tricep Extension", "triceps", 3, 12, 25, 35),
    # Shoulders
    ExerciseDefinition("lateral_raises", "Lateral Raises", "shoulders", 4, 12, 15, 25),
    ExerciseDefinition("rear_delt_flyes", "Rear Delt Flyes", "shoulders", 3, 12, 12, 20),
    ExerciseDefinition("shoulder_press", "Dumbbell Shoulder Press", "shoulders", 4, 10, 30, 45),
    ExerciseDefinition("front_raises", "Front Raises", "shoulders", 3, 12, 12, 20),
    # Biceps
    ExerciseDefinition("curls", "Dumbbell Curls", "biceps", 4, 10, 25, 40),
    ExerciseDefinition("hammer_curls", "Hammer Curls", "biceps", 3, 10, 20, 35),
    ExerciseDefinition("preacher_curls", "Preacher Curls", "biceps", 3, 10, 20, 30),
    # Compound / volume
    ExerciseDefinition("bench_press", "Barbell Bench Press", "compound", 4, 8, 135, 185),
    ExerciseDefinition("rows", "Dumbbell Rows", "compound", 4, 10, 40, 60),
    ExerciseDefinition("lat_pulldown", "Lat Pulldown", "compound", 4, 10, 100, 140),
)

EXERCISES: Mapping[str, ExerciseDefinition] = MappingProxyType(
    {exercise.id: exercise for exercise in _EXERCISE_LIST}
)

WORKOUT_TEMPLATES: Mapping[WorkoutType, tuple[str, ...]] = MappingProxyType({
    WorkoutType.CHEST_TRICEPS: (
        "flat_db_press",
        "incline_db_press",
        "cable_flyes",
        "skull_crushers",
        "tricep_pushdowns",
        "overhead_tricep",
    ),
    WorkoutType.SHOULDERS_BICEPS: (
        "shoulder_press",
        "lateral_raises",
        "rear_delt_flyes",
        "front_raises",
        "curls",
        "hammer_curls",
    ),
    WorkoutType.VOLUME: (
        "bench_press",
        "rows",
        "lat_pulldown",
        "shoulder_press",
        "curls",
        "skull_crushers",
    ),
    WorkoutType.CARDIO: (),
    WorkoutType.ACTIVE_REST: (),
})

MONTHLY_WEIGHT_TARGETS: Mapping[int, float] = MappingProxyType({
    1: 218, 2: 216, 3: 214, 4: 212, 5: 210, 6: 208,
    7: 206, 8: 204, 9: 202, 10: 200, 11: 197, 12: 195,
})


def scheduled_workout(on_date: date) -> WorkoutType | str:
    """Workout type the weekly schedule assigns to a date, or ``"rest"``."""
    return WEEKLY_SCHEDULE[on_date.weekday()]


def exercises_for_workout(workout_type: WorkoutType) -> list[ExerciseDefinition]:
    """Template exercises for a workout type, in order."""
    return [EXERCISES[exercise_id] for exercise_id in WORKOUT_TEMPLATES[workout_type]]


def monthly_lift_targets(month: int) -> dict[str, int]:
    """Linear progression from start weight to year-end target for a month (1-12)."""
    targets: dict[str, int] = {}
    for exercise_id, exercise in EXERCISES.items():
        if exercise.start_weight and exercise.target_weight:
            monthly_increase = (exercise.target_weight - exercise.start_weight) / 12
            # half-up rounding, so 22.5 lbs becomes 23
            targets[exercise_id] = math.floor(exercise.start_weight + monthly_increase * month + 0.5)
    return targets


def map_workout_type(activity: str, on_date: date) -> WorkoutType:
    """Map a free-text activity name onto the fixed workout types.

    Known workout type values pass through. Cardio and light activities are
    matched against ``ACTIVITY_NAME_MAP``. Anything else (strength training
    and unrecognised names) takes the type scheduled for that weekday, with
    ``REST_DAY_DEFAULT_WORKOUT`` on a rest day.
    """
    normalized = activity.strip().lower()

    if normalized in {member.value for member in WorkoutType}:
        return WorkoutType(normalized)

    mapped = ACTIVITY_NAME_MAP.get(normalized)
    if mapped is not None:
        return mapped

    scheduled = scheduled_workout(on_date)
    if scheduled == REST_DAY:
        return REST_DAY_DEFAULT_WORKOUT
    return WorkoutType(scheduled)
