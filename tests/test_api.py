"""
tests/test_api.py

HTTP contract tests. The app is assembled by create_app() with repository
and service dependencies overridden; the lifespan (database) never runs
because TestClient is not used as a context manager.
"""

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_record_repository
from app.main import create_app
from app.repositories.weekly_record_repository import BackendError
from app.services.cleanup_service import CleanupService, get_cleanup_service
from app.services.ingestion_service import get_ingestion_service
from normalization.periods import default_period_policy
from normalization.record import WeeklyRecord

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture()
def build_client(make_service, store):
    def _build(service=None, repository=None) -> TestClient:
        application = create_app()
        application.dependency_overrides[get_record_repository] = lambda: repository or store
        application.dependency_overrides[get_ingestion_service] = lambda: service or make_service()
        application.dependency_overrides[get_cleanup_service] = lambda: CleanupService(
            policy=default_period_policy()
        )
        return TestClient(application)

    return _build


@pytest.fixture()
def client(build_client) -> TestClient:
    return build_client()


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ---------------------------------------------------------------------------
# GET / POST /api/kpi
# ---------------------------------------------------------------------------


class TestKpiRead:
    def test_returns_stored_records(self, build_client, make_store) -> None:
        repository = make_store(
            [
                WeeklyRecord(period="25/08 a 31/08", period_start=date(2025, 8, 25), pa_semanal=70_000),
                WeeklyRecord(period="18/08 a 24/08", period_start=date(2025, 8, 18), pa_semanal=95_000),
            ]
        )

        response = build_client(repository=repository).get("/api/kpi")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 2
        assert body["periods"] == ["18/08 a 24/08", "25/08 a 31/08"]
        assert body["data"][0]["paSemanal"] == 95_000
        assert body["data"][0]["periodStart"] == "2025-08-18"
        assert body["stats"]["totalPA"] == 165_000
        assert "_meta" not in body

    def test_filters_from_query_string(self, build_client, make_store) -> None:
        repository = make_store(
            [
                WeeklyRecord(period="18/08 a 24/08", period_start=date(2025, 8, 18), percentual_meta_pa_semana=120),
                WeeklyRecord(period="25/08 a 31/08", period_start=date(2025, 8, 25), percentual_meta_pa_semana=80),
            ]
        )

        response = build_client(repository=repository).get("/api/kpi", params={"performancePA": "above"})

        assert response.json()["periods"] == ["18/08 a 24/08"]

    def test_invalid_performance_mode(self, client) -> None:
        assert client.get("/api/kpi", params={"performancePA": "sideways"}).status_code == 422

    def test_empty_table_is_bootstrapped(self, client, store) -> None:
        body = client.get("/api/kpi").json()

        assert body["count"] == 2
        assert body["_meta"]["source"] == "google_sheets"
        assert len(store.records) == 2

    def test_backend_failure(self, build_client) -> None:
        class _BrokenStore:
            def read_all(self):
                raise BackendError("Failed to read kpi_weekly_data: timeout")

        response = build_client(repository=_BrokenStore()).get("/api/kpi")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Failed to read kpi_weekly_data: timeout",
            "data": [],
        }


class TestKpiSeed:
    def test_seed(self, client, store) -> None:
        response = client.post("/api/kpi", json={"data": [{"period": "18/08 a 24/08", "paSemanal": 1000}]})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "1 records saved.", "synced": 1}
        assert store.records["18/08 a 24/08"].pa_semanal == 1000

    def test_empty_seed(self, client) -> None:
        response = client.post("/api/kpi", json={"data": []})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_backend_failure(self, build_client, make_store) -> None:
        client = build_client(repository=make_store(fail_writes=True))
        response = client.post("/api/kpi", json={"data": [{"period": "18/08 a 24/08"}]})

        assert response.status_code == 500
        assert response.json()["synced"] == 0


# ---------------------------------------------------------------------------
# Google Sheets
# ---------------------------------------------------------------------------


class TestGoogleSheets:
    def test_sync(self, client, store) -> None:
        response = client.post("/api/sync-sheets")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["synced"] == 2
        assert sorted(store.records) == ["18/08 a 24/08", "25/08 a 31/08"]

    def test_sync_empty_source(self, build_client, make_service) -> None:
        response = build_client(service=make_service("")).post("/api/sync-sheets")

        assert response.status_code == 200
        assert response.json()["synced"] == 0

    def test_sync_source_unavailable(self, build_client, make_service, unavailable_error) -> None:
        response = build_client(service=make_service(error=unavailable_error)).post("/api/sync-sheets")

        assert response.status_code == 502
        assert response.json() == {"success": False, "error": "google_sheets: upstream answered HTTP 503."}

    def test_sync_without_periods(self, build_client, make_service) -> None:
        response = build_client(service=make_service("Nome,Data\nabc,99/99\n")).post("/api/sync-sheets")

        assert response.status_code == 400
        body = response.json()
        assert body["diagnostics"]["columns"] == ["Nome", "Data"]

    def test_sync_backend_failure(self, build_client, make_store) -> None:
        response = build_client(repository=make_store(fail_writes=True)).post("/api/sync-sheets")
        assert response.status_code == 500

    def test_preview(self, client, store) -> None:
        body = client.get("/api/google-sheets").json()

        assert body["count"] == 2
        assert body["periods"] == ["18/08 a 24/08", "25/08 a 31/08"]
        assert store.records == {}

    def test_debug(self, client) -> None:
        body = client.get("/api/google-sheets/debug").json()

        assert body["rowCount"] == 7
        assert body["periodHeaders"] == ["18/08 a 24/08", "25/08 a 31/08"]
        assert len(body["sampleRows"]) == 3
        assert body["csvPreview"].startswith("Indicador,")


# ---------------------------------------------------------------------------
# Upload, cleanup, local data
# ---------------------------------------------------------------------------


class TestUpload:
    def test_insert_then_update(self, client, column_sheet_csv) -> None:
        files = {"file": ("kpi.csv", column_sheet_csv.encode("utf-8"), "text/csv")}

        first = client.post("/api/upload", files=files)
        second = client.post("/api/upload", files=files)

        assert first.status_code == 200
        assert first.json()["inserted"] == 2
        assert first.json()["total"] == 2
        assert "duplicatesInFile" not in first.json()
        assert second.json()["updated"] == 2
        assert second.json()["updatedPeriods"] == ["18/08 a 24/08", "25/08 a 31/08"]

    def test_duplicates_are_reported(self, client) -> None:
        content = b"Indicador,18/08 a 24/08,18/08 A 24/08\nPA semanal,1,2\n"
        body = client.post("/api/upload", files={"file": ("kpi.csv", content, "text/csv")}).json()

        assert body["inserted"] == 1
        assert body["duplicatesInFile"] == ["18/08 a 24/08"]

    def test_rejects_other_formats(self, client) -> None:
        response = client.post("/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_no_valid_periods(self, client) -> None:
        content = b"Nome,Data,Valor\nabc,99/99,1\n"
        response = client.post("/api/upload", files={"file": ("kpi.csv", content, "text/csv")})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "No valid period columns were found in the spreadsheet."
        assert body["diagnostics"]["candidate_columns"] == [{"column": "Data", "samples": ["99/99"]}]

    def test_empty_spreadsheet(self, client) -> None:
        response = client.post("/api/upload", files={"file": ("kpi.xlsx", b"", XLSX_TYPE)})
        assert response.status_code == 400

    def test_corrupt_workbook(self, client) -> None:
        response = client.post("/api/upload", files={"file": ("kpi.xlsx", b"garbage", XLSX_TYPE)})
        assert response.status_code == 400


def test_cleanup(build_client, make_store) -> None:
    repository = make_store([WeeklyRecord(period="18/08 a 24/08"), WeeklyRecord(period="Total geral")])

    response = build_client(repository=repository).post("/api/cleanup")

    assert response.status_code == 200
    assert response.json() == {
        "message": "1 invalid periods removed.",
        "total": 2,
        "deleted": 1,
        "valid": 1,
        "deletedPeriods": ["Total geral"],
    }


def test_local_sync_without_workbook(client) -> None:
    response = client.post("/api/sync-local-data")

    assert response.status_code == 404
    assert response.json()["error"].startswith("Local workbook not found")
