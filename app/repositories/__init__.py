"""
app/repositories package marker.
"""

from app.repositories.weekly_record_repository import (
    BackendError,
    BackendWriteError,
    UpsertResult,
    WeeklyRecordRepository,
)

__all__ = [
    "BackendError",
    "BackendWriteError",
    "UpsertResult",
    "WeeklyRecordRepository",
]
