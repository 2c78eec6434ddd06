"""Tests for the Health Auto Export import endpoints."""

from unittest.mock import patch

from httpx import AsyncClient
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.core import database
from fittrack.core.dates import local_today
from fittrack.models import NutritionLog, SleepLog, StepsLog, WeightLog


async def _count(db_session: AsyncSession, model) -> int:
    return await db_session.scalar(select(func.count()).select_from(model))


class TestSingleImport:
    """Tests for POST /api/health-import."""

    async def test_weight_record(self, client: AsyncClient, db_session: AsyncSession, bearer):
        response = await client.post(
            "/api/health-import",
            json={"type": "weight", "value": 215.5, "date": "2026-01-06"},
            headers=bearer,
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "weight data saved successfully",
            "table": "weight_logs",
            "date": "2026-01-06",
        }
        row = (await db_session.execute(select(WeightLog.weight, WeightLog.source))).one()
        assert row.weight == 215.5
        assert row.source == "apple_health"

    async def test_sleep_record(self, client: AsyncClient, db_session: AsyncSession, bearer):
        response = await client.post(
            "/api/health-import",
            json={"type": "sleep", "value": 7.25, "date": "2026-01-06"},
            headers=bearer,
        )

        assert response.status_code == 200
        assert response.json()["table"] == "sleep_logs"
        assert await db_session.scalar(select(SleepLog.hours)) == 7.25

    async def test_nutrition_record(self, client: AsyncClient, db_session: AsyncSession, bearer):
        response = await client.post(
            "/api/health-import",
            json={
                "type": "nutrition",
                "calories": 1800,
                "protein": 150,
                "carbs": 120.5,
                "date": "2026-01-06",
            },
            headers=bearer,
        )

        assert response.status_code == 200
        assert response.json()["table"] == "nutrition_logs"
        row = (
            await db_session.execute(
                select(NutritionLog.calories, NutritionLog.protein, NutritionLog.carbs, NutritionLog.fat)
            )
        ).one()
        assert tuple(row) == (1800, 150, 120.5, None)

    async def test_date_defaults_to_user_today(
        self, client: AsyncClient, db_session: AsyncSession, bearer
    ):
        response = await client.post(
            "/api/health-import",
            json={"type": "steps", "value": 8500},
            headers=bearer,
        )

        assert response.status_code == 200
        assert response.json()["date"] == local_today("America/New_York").isoformat()
        assert await db_session.scalar(select(StepsLog.steps)) == 8500

    async def test_second_import_overwrites(
        self, client: AsyncClient, db_session: AsyncSession, bearer
    ):
        for value in (215.5, 214.0):
            response = await client.post(
                "/api/health-import",
                json={"type": "weight", "value": value, "date": "2026-01-06"},
                headers=bearer,
            )
            assert response.status_code == 200

        rows = (await db_session.execute(select(WeightLog.weight))).scalars().all()
        assert rows == [214.0]

    async def test_out_of_range_value(self, client: AsyncClient, db_session: AsyncSession, bearer):
        response = await client.post(
            "/api/health-import",
            json={"type": "weight", "value": 20, "date": "2026-01-06"},
            headers=bearer,
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "invalid_payload"
        assert "value" in data["details"]
        assert await _count(db_session, WeightLog) == 0

    async def test_unknown_type(self, client: AsyncClient, bearer):
        response = await client.post(
            "/api/health-import",
            json={"type": "heart_rate", "value": 60},
            headers=bearer,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_payload"

    async def test_malformed_date(self, client: AsyncClient, bearer):
        response = await client.post(
            "/api/health-import",
            json={"type": "steps", "value": 100, "date": "01/06/2026"},
            headers=bearer,
        )

        assert response.status_code == 400
        assert "date" in response.json()["details"]


    async def test_boolean_steps_rejected(
        self, client: AsyncClient, db_session: AsyncSession, bearer
    ):
        response = await client.post(
            "/api/health-import",
            json={"type": "steps", "value": True, "date": "2026-01-06"},
            headers=bearer,
        )

        assert response.status_code == 400
        assert "value" in response.json()["details"]
        assert await _count(db_session, StepsLog) == 0

    async def test_numeric_string_rejected(
        self, client: AsyncClient, db_session: AsyncSession, bearer
    ):
        response = await client.post(
            "/api/health-import",
            json={"type": "weight", "value": "215.5", "date": "2026-01-06"},
            headers=bearer,
        )

        assert response.status_code == 400
        assert await _count(db_session, WeightLog) == 0

    async def test_integer_weight_accepted(self, client: AsyncClient, db_session: AsyncSession, bearer):
        response = await client.post(
            "/api/health-import",
            json={"type": "weight", "value": 215, "date": "2026-01-06"},
            headers=bearer,
        )

        assert response.status_code == 200
        assert await db_session.scalar(select(WeightLog.weight)) == 215.0

    async def test_unknown_tag_that_is_not_utf8(self, client: AsyncClient, bearer):
        response = await client.post(
            "/api/health-import",
            content=b'{"type": "\\ud800", "value": 1}',
            headers={**bearer, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_payload"

class TestImportAuthentication:
    """Key resolution for the import endpoints."""

    async def test_missing_key(self, client: AsyncClient, db_session: AsyncSession, test_user):
        response = await client.post(
            "/api/health-import",
            json={"type": "weight", "value": 215.5},
        )

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert "Authorization: Bearer" in response.json()["message"]
        assert await _count(db_session, WeightLog) == 0

    async def test_unknown_key_writes_nothing(
        self, client: AsyncClient, db_session: AsyncSession, api_key
    ):
        response = await client.post(
            "/api/health-import",
            json={"type": "weight", "value": 215.5},
            headers={"Authorization": "Bearer " + "0" * 64},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"
        assert await _count(db_session, WeightLog) == 0

    async def test_invalid_key_beats_invalid_body(self, client: AsyncClient, api_key):
        response = await client.post(
            "/api/health-import",
            json={"type": "weight", "value": -1},
            headers={"Authorization": "Bearer not-a-real-key"},
        )

        assert response.status_code == 401

    async def test_key_in_body(self, client: AsyncClient, db_session: AsyncSession, api_key):
        _, plaintext = api_key

        response = await client.post(
            "/api/health-import",
            json={"type": "weight", "value": 215.5, "date": "2026-01-06", "api_key": plaintext},
        )

        assert response.status_code == 200
        assert await _count(db_session, WeightLog) == 1

    async def test_header_wins_over_body(
        self, client: AsyncClient, db_session: AsyncSession, api_key
    ):
        _, plaintext = api_key

        response = await client.post(
            "/api/health-import",
            json={"type": "weight", "value": 215.5, "api_key": plaintext},
            headers={"Authorization": "Bearer " + "0" * 64},
        )

        assert response.status_code == 401
        assert await _count(db_session, WeightLog) == 0

    async def test_revoked_key(self, client: AsyncClient, auth_client: AsyncClient, api_key, bearer):
        record, _ = api_key
        key_id = record.id

        revoke = await auth_client.delete(f"/api/api-keys/{key_id}")
        assert revoke.status_code == 200

        response = await client.post(
            "/api/health-import",
            json={"type": "weight", "value": 215.5},
            headers=bearer,
        )
        assert response.status_code == 401

    async def test_rows_belong_to_key_owner(
        self, client: AsyncClient, db_session: AsyncSession, test_user, other_user, bearer
    ):
        user_id = test_user.id

        await client.post(
            "/api/health-import",
            json={"type": "weight", "value": 215.5, "date": "2026-01-06", "user_id": other_user.id},
            headers=bearer,
        )

        owners = (await db_session.execute(select(WeightLog.user_id))).scalars().all()
        assert owners == [user_id]


class TestBatchImport:
    """Tests for POST /api/health-import/batch."""

    async def test_partial_failure(self, client: AsyncClient, db_session: AsyncSession, bearer):
        response = await client.post(
            "/api/health-import/batch",
            json={
                "records": [
                    {"type": "weight", "value": 215.5, "date": "2026-01-05"},
                    {"type": "weight", "value": 9999, "date": "2026-01-06"},
                    {"type": "steps", "value": 8500, "date": "2026-01-06"},
                ]
            },
            headers=bearer,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["imported"] == 2
        assert data["failed"] == 1
        assert len(data["errors"]) == 1
        error = data["errors"][0]
        assert error["index"] == 1
        assert error["type"] == "weight"
        assert error["date"] == "2026-01-06"
        assert "value" in error["error"]

        assert await _count(db_session, WeightLog) == 1
        assert await _count(db_session, StepsLog) == 1

    async def test_all_records_imported(self, client: AsyncClient, bearer):
        response = await client.post(
            "/api/health-import/batch",
            json={
                "records": [
                    {"type": "weight", "value": 215.5, "date": "2026-01-05"},
                    {"type": "sleep", "value": 8, "date": "2026-01-05"},
                ]
            },
            headers=bearer,
        )

        assert response.json() == {"success": True, "imported": 2, "failed": 0}

    async def test_non_object_record(self, client: AsyncClient, bearer):
        response = await client.post(
            "/api/health-import/batch",
            json={"records": ["weight", {"type": "steps", "value": 10, "date": "2026-01-05"}]},
            headers=bearer,
        )

        data = response.json()
        assert data["imported"] == 1
        assert data["errors"][0]["index"] == 0
        assert data["errors"][0]["type"] == "invalid"
        assert data["errors"][0]["date"] is None

    async def test_empty_batch(self, client: AsyncClient, bearer):
        response = await client.post(
            "/api/health-import/batch",
            json={"records": []},
            headers=bearer,
        )

        assert response.status_code == 400
        assert "records" in response.json()["details"]

    async def test_batch_over_limit(self, client: AsyncClient, bearer):
        records = [{"type": "steps", "value": i, "date": "2026-01-05"} for i in range(101)]

        response = await client.post(
            "/api/health-import/batch",
            json={"records": records},
            headers=bearer,
        )

        assert response.status_code == 400

    async def test_storage_failure_is_reported_per_record(
        self, client: AsyncClient, db_session: AsyncSession, bearer
    ):
        real_build_upsert = database.build_upsert

        def failing_for_sleep(session, model, *args, **kwargs):
            if model is SleepLog:
                return text("INSERT INTO missing_table (id) VALUES (1)")
            return real_build_upsert(session, model, *args, **kwargs)

        with patch("fittrack.services.ingest.build_upsert", failing_for_sleep):
            response = await client.post(
                "/api/health-import/batch",
                json={
                    "records": [
                        {"type": "sleep", "value": 7, "date": "2026-01-05"},
                        {"type": "weight", "value": 215.5, "date": "2026-01-05"},
                    ]
                },
                headers=bearer,
            )

        data = response.json()
        assert data["imported"] == 1
        assert data["failed"] == 1
        assert data["errors"][0] == {
            "index": 0,
            "type": "sleep",
            "date": "2026-01-05",
            "error": "Failed to save sleep data",
        }
        assert await _count(db_session, WeightLog) == 1

    async def test_storage_failure_reports_resolved_date(
        self, client: AsyncClient, db_session: AsyncSession, bearer
    ):
        real_build_upsert = database.build_upsert

        def failing_for_steps(session, model, *args, **kwargs):
            if model is StepsLog:
                return text("INSERT INTO missing_table (id) VALUES (1)")
            return real_build_upsert(session, model, *args, **kwargs)

        with patch("fittrack.services.ingest.build_upsert", failing_for_steps):
            response = await client.post(
                "/api/health-import/batch",
                json={"records": [{"type": "steps", "value": 1200}]},
                headers=bearer,
            )

        error = response.json()["errors"][0]
        assert error["date"] == local_today("America/New_York").isoformat()
        assert error["error"] == "Failed to save steps data"

    async def test_text_that_is_not_utf8_is_not_echoed(
        self, client: AsyncClient, db_session: AsyncSession, bearer
    ):
        body = (
            b'{"records": ['
            b'{"type": "\\ud800", "value": 1},'
            b'{"type": "weight", "value": 215.5, "date": "\\udfff"},'
            b'{"type": "steps", "value": 8500, "date": "2026-01-06"}'
            b']}'
        )

        response = await client.post(
            "/api/health-import/batch",
            content=body,
            headers={**bearer, "Content-Type": "application/json"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["imported"] == 1
        assert data["failed"] == 2
        assert [(e["index"], e["type"], e["date"]) for e in data["errors"]] == [
            (0, "invalid", None),
            (1, "weight", None),
        ]
        assert await _count(db_session, StepsLog) == 1

    async def test_lax_numbers_fail_per_record(
        self, client: AsyncClient, db_session: AsyncSession, bearer
    ):
        response = await client.post(
            "/api/health-import/batch",
            json={
                "records": [
                    {"type": "steps", "value": True, "date": "2026-01-06"},
                    {"type": "sleep", "value": "7.5", "date": "2026-01-06"},
                    {"type": "sleep", "value": 7, "date": "2026-01-05"},
                ]
            },
            headers=bearer,
        )

        data = response.json()
        assert data["imported"] == 1
        assert [e["index"] for e in data["errors"]] == [0, 1]
        assert await _count(db_session, StepsLog) == 0
