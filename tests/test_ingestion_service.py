"""
tests/test_ingestion_service.py

KPIIngestionService against an in-memory store and a scripted sheet source.
"""

from __future__ import annotations

import io
from datetime import date

import pytest
from openpyxl import Workbook

from app.connectors.base import SourceUnavailableError
from app.repositories.weekly_record_repository import BackendWriteError
from app.services.ingestion_service import InvalidSeedPayloadError, LocalWorkbookNotFoundError
from normalization.layout import NoValidPeriodsError
from normalization.pipeline import STATUS_EMPTY, STATUS_OK
from normalization.record import WeeklyRecord

DUPLICATE_HEADER_CSV = "Indicador,18/08 a 24/08,18/08 a 24/08,25/08 a 31/08\nPA semanal,1000,2000,3000\n"


# ---------------------------------------------------------------------------
# Live sheet
# ---------------------------------------------------------------------------


class TestSheetSync:
    def test_preview_does_not_persist(self, make_service, store, today) -> None:
        result = make_service().preview_sheets(today=today)

        assert result.periods == ["18/08 a 24/08", "25/08 a 31/08"]
        assert store.upsert_calls == 0

    def test_sync_upserts_every_period(self, make_service, store, today) -> None:
        outcome = make_service().sync_from_sheets(store, today=today)

        assert outcome.synced == 2
        assert outcome.status == STATUS_OK
        assert outcome.message == "2 periods synced from Google Sheets."
        assert sorted(store.records) == ["18/08 a 24/08", "25/08 a 31/08"]
        assert store.records["18/08 a 24/08"].period_start == date(2025, 8, 18)
        assert outcome.report["unmatched_labels"] == {"simples nacional anexo iii": 1}

    @pytest.mark.parametrize("text", ["", "Indicador,18/08 a 24/08\n"])
    def test_empty_source_is_not_an_error(self, make_service, store, text: str) -> None:
        outcome = make_service(text).sync_from_sheets(store)

        assert outcome.status == STATUS_EMPTY
        assert outcome.synced == 0
        assert store.upsert_calls == 0

    def test_source_unavailable_propagates(self, make_service, store, unavailable_error) -> None:
        with pytest.raises(SourceUnavailableError):
            make_service(error=unavailable_error).sync_from_sheets(store)
        assert store.upsert_calls == 0

    def test_no_valid_periods(self, make_service, store) -> None:
        with pytest.raises(NoValidPeriodsError):
            make_service("Nome,Valor\nabc,1\n").sync_from_sheets(store)

    def test_backend_failure_propagates(self, make_service, make_store) -> None:
        with pytest.raises(BackendWriteError):
            make_service().sync_from_sheets(make_store(fail_writes=True))

    def test_debug_view(self, make_service, column_sheet_csv) -> None:
        details = make_service().debug_sheets()

        assert details["csv_length"] == len(column_sheet_csv)
        assert details["csv_preview"] == column_sheet_csv[:500]
        assert details["columns"] == ["Indicador", "18/08 a 24/08", "25/08 a 31/08"]
        assert details["row_count"] == 7
        assert len(details["sample_rows"]) == 3
        assert details["period_headers"] == ["18/08 a 24/08", "25/08 a 31/08"]
        assert [item["column"] for item in details["candidate_period_columns"]] == [
            "18/08 a 24/08",
            "25/08 a 31/08",
        ]


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------


class TestUpload:
    def test_insert_then_update(self, make_service, store, column_sheet_csv, today) -> None:
        service = make_service()
        content = column_sheet_csv.encode("utf-8")

        first = service.ingest_upload(content=content, filename="kpi.csv", store=store, today=today)
        second = service.ingest_upload(content=content, filename="kpi.csv", store=store, today=today)

        assert (first.inserted, first.updated, first.total) == (2, 0, 2)
        assert (second.inserted, second.updated) == (0, 2)
        assert second.updated_periods == ["18/08 a 24/08", "25/08 a 31/08"]
        assert first.message == "2 periods inserted, 0 updated."

    def test_duplicate_periods_in_file(self, make_service, store, today) -> None:
        outcome = make_service().ingest_upload(
            content=DUPLICATE_HEADER_CSV.encode("utf-8"),
            filename="kpi.csv",
            store=store,
            today=today,
        )

        assert outcome.inserted == 2
        assert outcome.duplicates_in_file == ["18/08 a 24/08"]
        assert "1 duplicate periods in the file were ignored" in outcome.message
        assert store.records["18/08 a 24/08"].pa_semanal == 1000

    def test_empty_file(self, make_service, store) -> None:
        outcome = make_service().ingest_upload(content=b"", filename="kpi.csv", store=store)

        assert outcome.status == STATUS_EMPTY
        assert outcome.total == 0
        assert store.upsert_calls == 0


# ---------------------------------------------------------------------------
# Seed and read
# ---------------------------------------------------------------------------


class TestSeedAndRead:
    def test_seed_deduplicates_and_resolves_dates(self, make_service, store, today) -> None:
        result = make_service().seed(
            [
                {"period": "18/08 a 24/08", "paSemanal": 1000},
                {"period": "18/08 A 24/08", "paSemanal": 9999},
                {"period": "25/08 a 31/08", "pa_semanal": "2000"},
            ],
            store,
            today=today,
        )

        assert result.inserted == 2
        assert store.records["18/08 a 24/08"].pa_semanal == 1000
        assert store.records["25/08 a 31/08"].period_start == date(2025, 8, 25)

    @pytest.mark.parametrize("payloads", [[], [{"paSemanal": 1}]])
    def test_invalid_seed(self, make_service, store, payloads) -> None:
        with pytest.raises(InvalidSeedPayloadError):
            make_service().seed(payloads, store)

    def test_read_sorts_chronologically_without_fetching(self, make_service, make_store, today) -> None:
        service = make_service()
        store = make_store(
            [
                WeeklyRecord(period="01/09 a 07/09", period_start=date(2025, 9, 1)),
                WeeklyRecord(period="25/08 a 31/08", period_start=date(2025, 8, 25)),
            ]
        )

        outcome = service.load_records(store, today=today)

        assert [record.period for record in outcome.records] == ["25/08 a 31/08", "01/09 a 07/09"]
        assert outcome.meta == {}
        assert service._sheet_source.calls == 0

    def test_empty_table_is_bootstrapped(self, make_service, store, today) -> None:
        outcome = make_service().load_records(store, today=today)

        assert [record.period for record in outcome.records] == ["18/08 a 24/08", "25/08 a 31/08"]
        assert outcome.meta == {"source": "google_sheets", "message": "2 periods synced from Google Sheets."}

    def test_bootstrap_failure_is_reported_not_raised(self, make_service, store, unavailable_error) -> None:
        outcome = make_service(error=unavailable_error).load_records(store)

        assert outcome.records == []
        assert outcome.meta["source"] == "google_sheets"
        assert outcome.meta["message"].startswith("Could not load the spreadsheet")

    def test_bootstrap_disabled(self, make_service, store) -> None:
        service = make_service(bootstrap=False)
        outcome = service.load_records(store)

        assert outcome.records == []
        assert outcome.meta == {}
        assert service._sheet_source.calls == 0


# ---------------------------------------------------------------------------
# Local file fallback
# ---------------------------------------------------------------------------


class TestLocalData:
    def test_missing_workbook(self, make_service) -> None:
        with pytest.raises(LocalWorkbookNotFoundError):
            make_service().sync_local_data()

    def test_writes_static_module(self, make_service, tmp_path, today) -> None:
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(["Indicador", "18/08 a 24/08", "25/08 a 31/08"])
        sheet.append(["PA Semanal Realizado", 95000, 120000])
        sheet.append(["N da Semana", 6, 8])
        buffer = io.BytesIO()
        workbook.save(buffer)
        source = tmp_path / "KPI DASH.xlsx"
        source.write_bytes(buffer.getvalue())
        target = tmp_path / "out" / "weekly_data.py"

        outcome = make_service().sync_local_data(
            workbook_path=str(source),
            output_path=str(target),
            today=today,
        )

        assert outcome.count == 2
        assert outcome.first_period == "18/08 a 24/08"
        assert outcome.last_period == "25/08 a 31/08"
        assert outcome.output_path == str(target)
        text = target.read_text(encoding="utf-8")
        assert "WEEKLY_DATA = [" in text
        assert "'paSemanal': 95000.0" in text
