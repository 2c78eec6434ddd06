"""Database models for FitTrack."""

from fittrack.models.user import User
from fittrack.models.api_key import ApiKey
from fittrack.models.health import WeightLog, StepsLog, SleepLog, NutritionLog
from fittrack.models.workout import Workout, ExerciseSet
from fittrack.models.habit import HabitLog
from fittrack.models.milestone import Milestone
from fittrack.models.review import WeeklyReview

__all__ = [
    # User
    "User",
    "ApiKey",
    # Health
    "WeightLog",
    "StepsLog",
    "SleepLog",
    "NutritionLog",
    # Workout
    "Workout",
    "ExerciseSet",
    # Tracking
    "HabitLog",
    "Milestone",
    "WeeklyReview",
]
