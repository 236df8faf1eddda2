"""
app/repositories/weekly_record_repository.py

Persistence layer for kpi_weekly_data.

Writes go through PostgreSQL INSERT ... ON CONFLICT (period) DO UPDATE, so
concurrent ingestions touching the same period resolve to last writer wins
at the row level. A stored period_start is never overwritten.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.mappers.weekly_record_mapper import ROW_COLUMNS, from_row, to_row
from db.models.kpi_weekly_data import KpiWeeklyData
from normalization.record import WeeklyRecord

logger = logging.getLogger(__name__)

_DEFAULT_BATCH_SIZE = 500
_MODEL_COLUMNS = ("id",) + ROW_COLUMNS + ("created_at", "updated_at")
_KEEP_ON_CONFLICT = frozenset({"period", "period_start"})

T = TypeVar("T")


class BackendError(RuntimeError):
    """
    Raised when the storage backend rejects a read or write.
    """


class BackendWriteError(BackendError):
    """
    Raised when an upsert or delete fails; nothing from the call is kept.
    """


@dataclass(frozen=True)
class UpsertResult:
    inserted: int
    updated: int
    updated_periods: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.inserted + self.updated


class WeeklyRecordRepository:
    """
    Repository for reading, upserting and deleting weekly KPI rows.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def read_all(self) -> list[WeeklyRecord]:
        """
        Return every stored record ordered by the period label.
        """

        try:
            models = self._session.scalars(select(KpiWeeklyData).order_by(KpiWeeklyData.period)).all()
        except SQLAlchemyError as exc:
            logger.error("kpi_weekly_data read failed error=%s", exc)
            raise BackendError(f"Failed to read kpi_weekly_data: {exc}") from exc
        return [from_row({name: getattr(model, name) for name in _MODEL_COLUMNS}) for model in models]

    def upsert(
        self,
        records: Sequence[WeeklyRecord],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> UpsertResult:
        """
        Insert or update records keyed by period.

        Inserted/updated counts come from the periods already stored before
        the write.
        """

        if not records:
            return UpsertResult(inserted=0, updated=0)

        payloads = [to_row(record) for record in records]
        periods = [payload["period"] for payload in payloads]

        def _write() -> UpsertResult:
            existing = set(
                self._session.scalars(
                    select(KpiWeeklyData.period).where(KpiWeeklyData.period.in_(periods))
                ).all()
            )
            size = max(1, batch_size)
            for start in range(0, len(payloads), size):
                chunk = payloads[start : start + size]
                stmt = insert(KpiWeeklyData).values(chunk)
                update_columns: dict[str, Any] = {
                    name: stmt.excluded[name] for name in ROW_COLUMNS if name not in _KEEP_ON_CONFLICT
                }
                # period_start is resolved once, at first ingestion
                update_columns["period_start"] = func.coalesce(
                    KpiWeeklyData.period_start, stmt.excluded.period_start
                )
                update_columns["updated_at"] = func.now()
                self._session.execute(
                    stmt.on_conflict_do_update(index_elements=["period"], set_=update_columns)
                )

            updated_periods = [period for period in periods if period in existing]
            return UpsertResult(
                inserted=len(periods) - len(updated_periods),
                updated=len(updated_periods),
                updated_periods=updated_periods,
            )

        result = self._write(_write, action="upsert")
        logger.info(
            "kpi_weekly_data upsert inserted=%s updated=%s",
            result.inserted,
            result.updated,
        )
        return result

    def delete(self, ids: Sequence[str]) -> int:
        """
        Bulk-delete rows by id and return the number removed.
        """

        if not ids:
            return 0
        identifiers = [uuid.UUID(str(identifier)) for identifier in ids]

        def _write() -> int:
            outcome = self._session.execute(delete(KpiWeeklyData).where(KpiWeeklyData.id.in_(identifiers)))
            return int(outcome.rowcount or 0)

        deleted = self._write(_write, action="delete")
        logger.info("kpi_weekly_data delete requested=%s deleted=%s", len(identifiers), deleted)
        return deleted

    def _write(self, operation: Callable[[], T], *, action: str) -> T:
        try:
            result = operation()
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error("kpi_weekly_data %s failed error=%s", action, exc)
            raise BackendWriteError(f"Failed to {action} kpi_weekly_data: {exc}") from exc
        return result
