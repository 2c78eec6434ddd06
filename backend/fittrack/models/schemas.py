"""Request schemas for health data import.

Plausibility ranges live here so every ingestion path (single record, batch,
Shortcuts sync and manual logs) rejects the same out-of-range values.
"""

import re
from datetime import date
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    field_validator,
    model_validator,
)

from fittrack.core.config import get_settings

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Plausibility ranges (inclusive)
WEIGHT_RANGE = (50, 500)  # lbs
STEPS_RANGE = (0, 200_000)
SLEEP_RANGE = (0, 24)  # hours
CALORIES_RANGE = (0, 20_000)
PROTEIN_RANGE = (0, 1_000)  # grams
CARBS_RANGE = (0, 2_000)  # grams
FAT_RANGE = (0, 1_000)  # grams
WORKOUT_DURATION_RANGE = (0, 300)  # minutes
WORKOUT_CALORIES_RANGE = (0, 5_000)


def _parse_iso_date(value: Any) -> Any:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("Date must be in YYYY-MM-DD format")
    return date.fromisoformat(value)


IsoDate = Annotated[date, BeforeValidator(_parse_iso_date)]

# Free-text activity name from a third-party app, e.g. "Running"
ActivityName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class _ImportRecord(BaseModel):
    """Fields shared by every typed record."""

    model_config = ConfigDict(extra="ignore")

    date: Optional[IsoDate] = None


class WeightRecord(_ImportRecord):
    type: Literal["weight"]
    value: float = Field(ge=WEIGHT_RANGE[0], le=WEIGHT_RANGE[1], strict=True)


class StepsRecord(_ImportRecord):
    type: Literal["steps"]
    value: int = Field(ge=STEPS_RANGE[0], le=STEPS_RANGE[1], strict=True)


class SleepRecord(_ImportRecord):
    type: Literal["sleep"]
    value: float = Field(ge=SLEEP_RANGE[0], le=SLEEP_RANGE[1], strict=True)


class NutritionRecord(_ImportRecord):
    type: Literal["nutrition"]
    calories: Optional[int] = Field(None, ge=CALORIES_RANGE[0], le=CALORIES_RANGE[1], strict=True)
    protein: Optional[float] = Field(None, ge=PROTEIN_RANGE[0], le=PROTEIN_RANGE[1], strict=True)
    carbs: Optional[float] = Field(None, ge=CARBS_RANGE[0], le=CARBS_RANGE[1], strict=True)
    fat: Optional[float] = Field(None, ge=FAT_RANGE[0], le=FAT_RANGE[1], strict=True)


HealthRecord = Annotated[
    Union[WeightRecord, StepsRecord, SleepRecord, NutritionRecord],
    Field(discriminator="type"),
]

health_record_adapter: TypeAdapter[HealthRecord] = TypeAdapter(HealthRecord)

RECORD_TYPES = ("weight", "steps", "sleep", "nutrition")


def field_errors(errors: list[dict[str, Any]]) -> dict[str, list[str]]:
    """Group pydantic error dicts by dotted field path.

    The discriminator tag that prefixes union errors is dropped, as is the
    "body" prefix FastAPI adds. Messages can quote the input back, so text
    that is not valid UTF-8 is replaced before it reaches a response.
    """
    grouped: dict[str, list[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and (loc[0] == "body" or loc[0] in RECORD_TYPES):
            loc = loc[1:]
        path = _printable(".".join(loc)) or "__root__"
        grouped.setdefault(path, []).append(_printable(str(error.get("msg", "Invalid value"))))
    return grouped


def _printable(text: str) -> str:
    return text.encode("utf-8", "replace").decode("utf-8")


class BatchImportRequest(BaseModel):
    """POST /health-import/batch.

    Records are kept raw so one malformed record is reported on its own
    instead of rejecting the whole batch.
    """

    records: list[Any] = Field(min_length=1)
    api_key: Optional[str] = None

    @field_validator("records")
    @classmethod
    def check_batch_size(cls, records: list[Any]) -> list[Any]:
        limit = get_settings().batch_max_records
        if len(records) > limit:
            raise ValueError(f"At most {limit} records per batch")
        return records


class ShortcutsSyncRequest(BaseModel):
    """Combined payload sent by the iOS Shortcuts automation."""

    weight: Optional[float] = Field(None, ge=WEIGHT_RANGE[0], le=WEIGHT_RANGE[1], strict=True)
    steps: Optional[int] = Field(None, ge=STEPS_RANGE[0], le=STEPS_RANGE[1], strict=True)
    sleep: Optional[float] = Field(None, ge=SLEEP_RANGE[0], le=SLEEP_RANGE[1], strict=True)
    calories: Optional[int] = Field(None, ge=CALORIES_RANGE[0], le=CALORIES_RANGE[1], strict=True)
    protein: Optional[float] = Field(None, ge=PROTEIN_RANGE[0], le=PROTEIN_RANGE[1], strict=True)
    carbs: Optional[float] = Field(None, ge=CARBS_RANGE[0], le=CARBS_RANGE[1], strict=True)
    fat: Optional[float] = Field(None, ge=FAT_RANGE[0], le=FAT_RANGE[1], strict=True)
    workout_type: Optional[ActivityName] = None
    workout_duration: Optional[int] = Field(
        None, ge=WORKOUT_DURATION_RANGE[0], le=WORKOUT_DURATION_RANGE[1], strict=True
    )
    workout_calories: Optional[int] = Field(
        None, ge=WORKOUT_CALORIES_RANGE[0], le=WORKOUT_CALORIES_RANGE[1], strict=True
    )
    date: Optional[IsoDate] = None
    api_key: Optional[str] = None

    @model_validator(mode="after")
    def require_metric(self) -> "ShortcutsSyncRequest":
        fields = ("weight", "steps", "sleep", "calories", "protein", "carbs", "fat", "workout_type")
        if all(getattr(self, name) is None for name in fields):
            raise ValueError("At least one health metric or workout_type is required")
        return self

    @property
    def has_nutrition(self) -> bool:
        return any(
            value is not None
            for value in (self.calories, self.protein, self.carbs, self.fat)
        )
