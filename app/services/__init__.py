"""
app/services package marker.
"""

from app.services.cleanup_service import CleanupOutcome, CleanupService, get_cleanup_service
from app.services.filters import FilterState, filter_records, filter_stats
from app.services.ingestion_service import (
    InvalidSeedPayloadError,
    KPIIngestionService,
    LocalWorkbookNotFoundError,
    get_ingestion_service,
    get_normalization_pipeline,
)

__all__ = [
    "CleanupOutcome",
    "CleanupService",
    "FilterState",
    "InvalidSeedPayloadError",
    "KPIIngestionService",
    "LocalWorkbookNotFoundError",
    "filter_records",
    "filter_stats",
    "get_cleanup_service",
    "get_ingestion_service",
    "get_normalization_pipeline",
]
