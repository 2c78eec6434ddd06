"""Health data ingestion dispatcher.

Routes validated payloads from the import endpoints to per-metric upserts.
Every metric write is committed on its own: a failing write is rolled back
and reported without undoing writes that already succeeded.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from functools import partial
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.core.database import build_upsert
from fittrack.core.dates import local_today
from fittrack.core.errors import StorageError
from fittrack.core.workout_constants import map_workout_type
from fittrack.models import NutritionLog, SleepLog, StepsLog, WeightLog, Workout
from fittrack.models.schemas import (
    RECORD_TYPES,
    NutritionRecord,
    ShortcutsSyncRequest,
    field_errors,
    health_record_adapter,
)
from fittrack.observability import get_metrics_backend

logger = logging.getLogger(__name__)

METRIC_TABLES = {
    "weight": WeightLog.__tablename__,
    "steps": StepsLog.__tablename__,
    "sleep": SleepLog.__tablename__,
    "nutrition": NutritionLog.__tablename__,
    "workout": Workout.__tablename__,
}

DAILY_KEY = ("user_id", "date")
WORKOUT_KEY = ("user_id", "date", "workout_type")


@dataclass
class BatchResult:
    """Outcome of a batch import."""

    imported: int = 0
    failed: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def add_failure(self, index: int, record_type: Any, record_date: Any, error: str) -> None:
        self.failed += 1
        self.errors.append({
            "index": index,
            "type": record_type,
            "date": record_date,
            "error": error,
        })

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": self.success,
            "imported": self.imported,
            "failed": self.failed,
        }
        if self.errors:
            body["errors"] = self.errors
        return body


@dataclass
class SyncResult:
    """Outcome of a combined Shortcuts sync."""

    date: date
    saved: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        day = self.date.isoformat()
        saved = ", ".join(self.saved)
        body: dict[str, Any] = {
            "success": self.success,
            "date": day,
            "saved": self.saved,
            "message": f"Synced {saved} for {day}" if self.success else f"Partial sync: {saved}",
        }
        if self.errors:
            body["errors"] = self.errors
        return body


class IngestionDispatcher:
    """Write imported metrics for a single, already authenticated user."""

    def __init__(
        self,
        session: AsyncSession,
        user_id: int,
        timezone: Optional[str] = None,
        source: str = "apple_health",
        endpoint: str = "health_import",
    ):
        self.session = session
        self.user_id = user_id
        self.timezone = timezone
        self.source = source
        self.endpoint = endpoint
        self.metrics = get_metrics_backend()

    def resolve_date(self, value: Optional[date]) -> date:
        """Item date, or today in the user's timezone when omitted."""
        return value or local_today(self.timezone)

    # ---------------------------------------------------------------------
    # Operations
    # ---------------------------------------------------------------------

    async def import_record(self, record) -> date:
        """Upsert one typed record.

        Returns:
            The date the record was stored under.

        Raises:
            StorageError: If the write fails.
        """
        on_date = self.resolve_date(record.date)
        if isinstance(record, NutritionRecord):
            await self._save_nutrition(
                on_date,
                calories=record.calories,
                protein=record.protein,
                carbs=record.carbs,
                fat=record.fat,
            )
        else:
            await self._save_daily(record.type, on_date, record.value)
        return on_date

    async def import_batch(self, raw_records: list[Any]) -> BatchResult:
        """Validate and write each record independently."""
        result = BatchResult()

        for index, raw in enumerate(raw_records):
            try:
                record = health_record_adapter.validate_python(raw)
            except PydanticValidationError as e:
                record_type = _metric_label(raw.get("type") if isinstance(raw, dict) else None)
                record_date = _echo_date(raw.get("date") if isinstance(raw, dict) else None)
                result.add_failure(index, record_type, record_date, _describe(e))
                self.metrics.observe_ingest(self.endpoint, record_type, False)
                continue

            on_date = self.resolve_date(record.date)
            try:
                await self.import_record(record)
            except StorageError as e:
                result.add_failure(index, record.type, on_date.isoformat(), e.message)
                continue

            result.imported += 1

        logger.info(
            f"Batch import for user {self.user_id}: "
            f"{result.imported} imported, {result.failed} failed"
        )
        return result

    async def sync(self, payload: ShortcutsSyncRequest) -> SyncResult:
        """Write every metric present in a combined payload."""
        on_date = self.resolve_date(payload.date)
        result = SyncResult(date=on_date)

        writes = []
        if payload.weight is not None:
            writes.append(("weight", partial(self._save_daily, "weight", on_date, payload.weight)))
        if payload.steps is not None:
            writes.append(("steps", partial(self._save_daily, "steps", on_date, payload.steps)))
        if payload.sleep is not None:
            writes.append(("sleep", partial(self._save_daily, "sleep", on_date, payload.sleep)))
        if payload.has_nutrition:
            writes.append((
                "nutrition",
                partial(
                    self._save_nutrition,
                    on_date,
                    calories=payload.calories,
                    protein=payload.protein,
                    carbs=payload.carbs,
                    fat=payload.fat,
                ),
            ))
        if payload.workout_type is not None:
            writes.append((
                "workout",
                partial(
                    self._save_workout,
                    on_date,
                    payload.workout_type,
                    duration_minutes=payload.workout_duration,
                    calories=payload.workout_calories,
                ),
            ))

        for metric, write in writes:
            try:
                await write()
            except StorageError as e:
                result.errors.append(f"{metric}: {e.message}")
            else:
                result.saved.append(metric)

        return result

    # ---------------------------------------------------------------------
    # Upserts
    # ---------------------------------------------------------------------

    async def _save_daily(self, metric: str, on_date: date, value: float) -> None:
        model, column = {
            "weight": (WeightLog, "weight"),
            "steps": (StepsLog, "steps"),
            "sleep": (SleepLog, "hours"),
        }[metric]
        stmt = build_upsert(
            self.session,
            model,
            {
                "user_id": self.user_id,
                "date": on_date,
                column: value,
                "source": self.source,
            },
            DAILY_KEY,
        )
        await self._execute(metric, stmt)

    async def _save_nutrition(self, on_date: date, **macros: Optional[float]) -> None:
        stmt = build_upsert(
            self.session,
            NutritionLog,
            {
                "user_id": self.user_id,
                "date": on_date,
                **macros,
                "source": self.source,
            },
            DAILY_KEY,
        )
        await self._execute("nutrition", stmt)

    async def _save_workout(
        self,
        on_date: date,
        activity: str,
        duration_minutes: Optional[int] = None,
        calories: Optional[int] = None,
    ) -> None:
        workout_type = map_workout_type(activity, on_date)
        values = {
            "user_id": self.user_id,
            "date": on_date,
            "workout_type": workout_type.value,
            "completed": True,
            "duration_minutes": duration_minutes,
            "calories": calories,
            "source": self.source,
        }
        if activity.strip().lower() != workout_type.value:
            values["notes"] = activity.strip()

        # Notes are only set on insert so an import never clobbers manual notes
        stmt = build_upsert(
            self.session,
            Workout,
            values,
            WORKOUT_KEY,
            update_columns=("completed", "duration_minutes", "calories", "source"),
        )
        await self._execute("workout", stmt)

    async def _execute(self, metric: str, stmt) -> None:
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to save {metric} for user {self.user_id}: {e}")
            self.metrics.observe_ingest(self.endpoint, metric, False)
            raise StorageError(f"Failed to save {metric} data") from e

        self.metrics.observe_ingest(self.endpoint, metric, True)


def _describe(exc: PydanticValidationError) -> str:
    return "; ".join(
        f"{name}: {', '.join(messages)}" if name != "__root__" else ", ".join(messages)
        for name, messages in field_errors(exc.errors()).items()
    )


def _metric_label(record_type: Any) -> str:
    return record_type if record_type in RECORD_TYPES else "invalid"


def _echo_date(value: Any) -> Optional[str]:
    """Raw date for an error entry, or None when it cannot be sent back as JSON text."""
    if not isinstance(value, str):
        return None
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return None
    return value
