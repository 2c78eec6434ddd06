"""Tests for the workout taxonomy and schedule tables."""

from datetime import date

import pytest

from fittrack.core.workout_constants import (
    EXERCISES,
    MONTHLY_WEIGHT_TARGETS,
    REST_DAY,
    REST_DAY_DEFAULT_WORKOUT,
    WEEKLY_SCHEDULE,
    WORKOUT_TEMPLATES,
    WorkoutType,
    exercises_for_workout,
    map_workout_type,
    monthly_lift_targets,
    scheduled_workout,
)

MONDAY = date(2026, 1, 5)
TUESDAY = date(2026, 1, 6)
WEDNESDAY = date(2026, 1, 7)
FRIDAY = date(2026, 1, 9)
SUNDAY = date(2026, 1, 4)


class TestSchedule:
    """Weekly schedule lookups."""

    def test_week(self):
        week = [scheduled_workout(date(2026, 1, 5 + offset)) for offset in range(7)]

        assert week == [
            WorkoutType.CHEST_TRICEPS,
            WorkoutType.CARDIO,
            WorkoutType.SHOULDERS_BICEPS,
            WorkoutType.CARDIO,
            WorkoutType.VOLUME,
            WorkoutType.ACTIVE_REST,
            REST_DAY,
        ]

    def test_five_training_days(self):
        training = [t for t in WEEKLY_SCHEDULE.values() if t not in (REST_DAY, WorkoutType.ACTIVE_REST)]

        assert len(training) == 5

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            WEEKLY_SCHEDULE[6] = WorkoutType.VOLUME
        with pytest.raises(TypeError):
            EXERCISES["new"] = EXERCISES["curls"]


class TestTemplates:
    """Exercise templates per workout type."""

    def test_every_template_exercise_exists(self):
        for exercise_ids in WORKOUT_TEMPLATES.values():
            for exercise_id in exercise_ids:
                assert exercise_id in EXERCISES

    def test_chest_triceps_order(self):
        names = [e.id for e in exercises_for_workout(WorkoutType.CHEST_TRICEPS)]

        assert names[0] == "flat_db_press"
        assert len(names) == 6

    def test_cardio_has_no_exercises(self):
        assert exercises_for_workout(WorkoutType.CARDIO) == []


class TestTargets:
    """Monthly weight and lift targets."""

    def test_weight_targets_descend(self):
        values = [MONTHLY_WEIGHT_TARGETS[month] for month in range(1, 13)]

        assert values == sorted(values, reverse=True)
        assert values[-1] == 195

    def test_month_twelve_reaches_year_end_target(self):
        targets = monthly_lift_targets(12)

        for exercise_id, weight in targets.items():
            assert weight == EXERCISES[exercise_id].target_weight

    def test_half_pounds_round_up(self):
        # 35 + (50 - 35) / 12 * 6 = 42.5
        assert monthly_lift_targets(6)["tricep_pushdowns"] == 43

    def test_linear_progression(self):
        assert monthly_lift_targets(3)["bench_press"] == 148  # 135 + 12.5 -> 147.5


class TestMapWorkoutType:
    """Free-text activity names onto workout types."""

    @pytest.mark.parametrize(
        "activity, expected",
        [
            ("Running", WorkoutType.CARDIO),
            ("  indoor cycling ", WorkoutType.CARDIO),
            ("HIIT", WorkoutType.CARDIO),
            ("Walking", WorkoutType.ACTIVE_REST),
            ("Yoga", WorkoutType.ACTIVE_REST),
        ],
    )
    def test_known_activities(self, activity, expected):
        assert map_workout_type(activity, MONDAY) == expected

    def test_type_values_pass_through(self):
        assert map_workout_type("volume", MONDAY) == WorkoutType.VOLUME
        assert map_workout_type("Shoulders_Biceps", TUESDAY) == WorkoutType.SHOULDERS_BICEPS

    @pytest.mark.parametrize(
        "on_date, expected",
        [
            (MONDAY, WorkoutType.CHEST_TRICEPS),
            (TUESDAY, WorkoutType.CARDIO),
            (WEDNESDAY, WorkoutType.SHOULDERS_BICEPS),
            (FRIDAY, WorkoutType.VOLUME),
        ],
    )
    def test_strength_training_follows_schedule(self, on_date, expected):
        assert map_workout_type("Traditional Strength Training", on_date) == expected

    def test_rest_day_fallback(self):
        assert map_workout_type("Functional Strength Training", SUNDAY) == REST_DAY_DEFAULT_WORKOUT
        assert REST_DAY_DEFAULT_WORKOUT == WorkoutType.VOLUME

    def test_unknown_activity_uses_schedule(self):
        assert map_workout_type("Kickboxing", WEDNESDAY) == WorkoutType.SHOULDERS_BICEPS
