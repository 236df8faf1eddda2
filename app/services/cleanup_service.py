"""
app/services/cleanup_service.py

Data-quality sweep: delete stored rows whose period no longer passes the
period validity policy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache

from app.services.ingestion_service import RecordStore, get_normalization_pipeline
from normalization.periods import PeriodPolicy, is_valid_period

logger = logging.getLogger(__name__)


@dataclass
class CleanupOutcome:
    total: int
    deleted: int
    valid: int
    deleted_periods: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if not self.deleted:
            return "No invalid periods found."
        return f"{self.deleted} invalid periods removed."


class CleanupService:
    """
    Re-validates every stored period and bulk-deletes the failures.
    """

    def __init__(self, *, policy: PeriodPolicy) -> None:
        self._policy = policy

    def run(self, store: RecordStore) -> CleanupOutcome:
        records = store.read_all()
        invalid = [record for record in records if not is_valid_period(record.period, self._policy)]
        ids = [record.id for record in invalid if record.id is not None]

        deleted = store.delete(ids) if ids else 0
        if invalid:
            logger.warning(
                "Cleanup removed invalid periods deleted=%s periods=%s",
                deleted,
                [record.period for record in invalid],
            )
        return CleanupOutcome(
            total=len(records),
            deleted=deleted,
            valid=len(records) - len(invalid),
            deleted_periods=[record.period for record in invalid],
        )


@lru_cache(maxsize=1)
def get_cleanup_service() -> CleanupService:
    return CleanupService(policy=get_normalization_pipeline().policy)
