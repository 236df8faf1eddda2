"""
app/services/ingestion_service.py

Service layer for weekly KPI ingestion.

Every entry point (live Google Sheets sync, workbook upload, local file
fallback) decodes its source into a SheetMatrix, runs the one shared
NormalizationPipeline and hands the finished record list to a sink. The
record list is complete before any write, so a failed run never leaves a
partial batch behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence

from app.config import (
    LocalDataSettings,
    get_google_sheets_settings,
    get_local_data_settings,
    get_normalization_settings,
)
from app.connectors.base import SourceUnavailableError
from app.connectors.google_sheets_connector import GoogleSheetsConnector
from app.mappers.weekly_record_mapper import from_payload
from app.repositories.weekly_record_repository import BackendError, UpsertResult
from app.sinks.static_module_sink import write_weekly_data_module
from app.sources.spreadsheet_reader import SpreadsheetDecodeError, read_csv_text, read_spreadsheet
from normalization.catalog import load_indicator_catalog, load_period_denylist
from normalization.finalize import deduplicate, sort_records
from normalization.layout import NoValidPeriodsError, candidate_period_columns
from normalization.periods import PeriodPolicy, is_valid_period
from normalization.pipeline import STATUS_EMPTY, NormalizationPipeline, PipelineResult
from normalization.record import WeeklyRecord

logger = logging.getLogger(__name__)

_DEBUG_PREVIEW_CHARS = 500
_DEBUG_SAMPLE_ROWS = 3


# ---------------------------------------------------------------------------
# Collaborator protocols and exceptions
# ---------------------------------------------------------------------------


class RecordStore(Protocol):
    def read_all(self) -> list[WeeklyRecord]: ...

    def upsert(self, records: Sequence[WeeklyRecord]) -> UpsertResult: ...

    def delete(self, ids: Sequence[str]) -> int: ...


class TextSource(Protocol):
    def fetch_text(self) -> str: ...


class InvalidSeedPayloadError(ValueError):
    """
    Raised when seed records are missing or malformed.
    """


class LocalWorkbookNotFoundError(FileNotFoundError):
    """
    Raised when the local fallback workbook does not exist.
    """


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass
class SyncOutcome:
    synced: int
    status: str
    message: str
    report: dict[str, Any] = field(default_factory=dict)


@dataclass
class UploadOutcome:
    inserted: int
    updated: int
    status: str
    message: str
    duplicates_in_file: list[str] = field(default_factory=list)
    updated_periods: list[str] = field(default_factory=list)
    report: dict[str, Any] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.inserted + self.updated


@dataclass
class ReadOutcome:
    records: list[WeeklyRecord]
    meta: dict[str, str] = field(default_factory=dict)


@dataclass
class LocalSyncOutcome:
    count: int
    periods: list[str]
    output_path: str
    message: str

    @property
    def first_period(self) -> str | None:
        return self.periods[0] if self.periods else None

    @property
    def last_period(self) -> str | None:
        return self.periods[-1] if self.periods else None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class KPIIngestionService:
    """
    Coordinates source decoding, normalization and persistence.
    """

    def __init__(
        self,
        *,
        pipeline: NormalizationPipeline,
        sheet_source: TextSource,
        local_settings: LocalDataSettings,
        bootstrap_on_empty_read: bool = True,
    ) -> None:
        self._pipeline = pipeline
        self._sheet_source = sheet_source
        self._local_settings = local_settings
        self._bootstrap_on_empty_read = bootstrap_on_empty_read

    @property
    def pipeline(self) -> NormalizationPipeline:
        return self._pipeline

    # -- live sheet ---------------------------------------------------------

    def preview_sheets(self, *, today: date | None = None) -> PipelineResult:
        """
        Fetch and normalize the live sheet without persisting anything.
        """

        text = self._sheet_source.fetch_text()
        return self._pipeline.run(read_csv_text(text), today)

    def sync_from_sheets(self, store: RecordStore, *, today: date | None = None) -> SyncOutcome:
        """
        Fetch the live sheet, normalize it and upsert every period.

        An empty export is reported as status "empty" and leaves stored data
        untouched.
        """

        result = self.preview_sheets(today=today)
        if result.status == STATUS_EMPTY or not result.records:
            logger.info("Google Sheets sync found no data")
            return SyncOutcome(
                synced=0,
                status=STATUS_EMPTY,
                message="The spreadsheet returned no data; stored records were kept.",
                report=result.report(),
            )

        upserted = store.upsert(result.records)
        logger.info(
            "Google Sheets sync complete synced=%s inserted=%s updated=%s",
            upserted.total,
            upserted.inserted,
            upserted.updated,
        )
        return SyncOutcome(
            synced=upserted.total,
            status=result.status,
            message=f"{upserted.total} periods synced from Google Sheets.",
            report=result.report(),
        )

    def debug_sheets(self) -> dict[str, Any]:
        """
        Raw view of the live export for diagnosing a sheet that fails to
        parse.
        """

        text = self._sheet_source.fetch_text()
        matrix = read_csv_text(text)
        period_headers = [
            matrix.label(column)
            for column in matrix.columns
            if is_valid_period(matrix.label(column), self._pipeline.policy)
        ]
        return {
            "csv_length": len(text),
            "csv_preview": text[:_DEBUG_PREVIEW_CHARS],
            "columns": [matrix.label(column) for column in matrix.columns],
            "row_count": len(matrix.rows),
            "sample_rows": matrix.rows[:_DEBUG_SAMPLE_ROWS],
            "period_headers": period_headers,
            "candidate_period_columns": candidate_period_columns(matrix),
        }

    # -- upload ------------------------------------------------------------

    def ingest_upload(
        self,
        *,
        content: bytes,
        filename: str,
        store: RecordStore,
        today: date | None = None,
    ) -> UploadOutcome:
        """
        Normalize an uploaded workbook and upsert its periods.

        Raises SpreadsheetDecodeError, NoValidPeriodsError or BackendWriteError.
        """

        result = self._pipeline.run(read_spreadsheet(content, filename), today)
        if result.status == STATUS_EMPTY or not result.records:
            return UploadOutcome(
                inserted=0,
                updated=0,
                status=STATUS_EMPTY,
                message="The spreadsheet is empty or has no data rows.",
                report=result.report(),
            )

        upserted = store.upsert(result.records)
        message = f"{upserted.inserted} periods inserted, {upserted.updated} updated."
        if result.duplicates:
            message += f" {len(result.duplicates)} duplicate periods in the file were ignored."
        logger.info(
            "Upload ingested filename=%s inserted=%s updated=%s duplicates=%s",
            filename,
            upserted.inserted,
            upserted.updated,
            len(result.duplicates),
        )
        return UploadOutcome(
            inserted=upserted.inserted,
            updated=upserted.updated,
            status=result.status,
            message=message,
            duplicates_in_file=result.duplicates,
            updated_periods=upserted.updated_periods,
            report=result.report(),
        )

    # -- seed / read -------------------------------------------------------

    def seed(
        self,
        payloads: Sequence[Mapping[str, Any]],
        store: RecordStore,
        *,
        today: date | None = None,
    ) -> UpsertResult:
        """
        Upsert caller-supplied records by period.
        """

        if not payloads:
            raise InvalidSeedPayloadError(
                'Send {"data": [{"period": "...", ...}]} with at least one record.'
            )
        try:
            records = [from_payload(payload) for payload in payloads]
        except (TypeError, ValueError) as exc:
            raise InvalidSeedPayloadError(str(exc)) from exc

        kept, _ = deduplicate(records)
        ordered, _ = sort_records(kept, today or date.today())
        return store.upsert(ordered)

    def load_records(self, store: RecordStore, *, today: date | None = None) -> ReadOutcome:
        """
        Read every stored record in chronological order.

        An empty table is seeded once from the live sheet when bootstrapping
        is enabled; the outcome is reported in ``meta``.
        """

        reference = today or date.today()
        records = store.read_all()
        meta: dict[str, str] = {}

        if not records and self._bootstrap_on_empty_read:
            meta = {"source": "google_sheets"}
            try:
                outcome = self.sync_from_sheets(store, today=reference)
            except (SourceUnavailableError, SpreadsheetDecodeError, NoValidPeriodsError, BackendError) as exc:
                logger.error("Bootstrap from Google Sheets failed error=%s", exc)
                meta["message"] = f"Could not load the spreadsheet: {exc}"
            else:
                meta["message"] = outcome.message
                if outcome.synced:
                    records = store.read_all()

        ordered, _ = sort_records(records, reference)
        return ReadOutcome(records=ordered, meta=meta)

    # -- local file fallback -------------------------------------------------

    def sync_local_data(
        self,
        *,
        workbook_path: str | None = None,
        output_path: str | None = None,
        today: date | None = None,
    ) -> LocalSyncOutcome:
        """
        Normalize the local workbook and regenerate the static data module.
        """

        source = Path(workbook_path or self._local_settings.workbook_path)
        if not source.is_file():
            raise LocalWorkbookNotFoundError(f"Local workbook not found: {source}")

        result = self._pipeline.run(read_spreadsheet(source.read_bytes(), source.name), today)
        target = write_weekly_data_module(
            result.records,
            output_path or self._local_settings.output_path,
            source=source.name,
        )
        return LocalSyncOutcome(
            count=len(result.records),
            periods=result.periods,
            output_path=str(target),
            message=f"{len(result.records)} periods written to {target.name}.",
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_normalization_pipeline() -> NormalizationPipeline:
    """
    Build and cache the pipeline from env-driven normalization settings.
    """

    settings = get_normalization_settings()
    policy = PeriodPolicy(
        min_length=settings.period_min_length,
        max_length=settings.period_max_length,
        denylist=load_period_denylist(settings.denylist_path),
        allow_range_fallback=settings.allow_range_fallback,
    )
    return NormalizationPipeline(
        policy=policy,
        catalog=load_indicator_catalog(settings.catalog_path),
        thresholds=settings.thresholds,
    )


@lru_cache(maxsize=1)
def get_ingestion_service() -> KPIIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """

    sheets_settings = get_google_sheets_settings()
    return KPIIngestionService(
        pipeline=get_normalization_pipeline(),
        sheet_source=GoogleSheetsConnector(settings=sheets_settings),
        local_settings=get_local_data_settings(),
        bootstrap_on_empty_read=sheets_settings.bootstrap_on_empty_read,
    )
