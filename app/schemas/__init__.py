"""
app/schemas package marker.
"""

from app.schemas.kpi import (
    CleanupResponse,
    ErrorResponse,
    KPIListResponse,
    LocalSyncResponse,
    SeedRequest,
    SeedResponse,
    SheetDebugResponse,
    SheetPreviewResponse,
    SyncResponse,
    UploadResponse,
)

__all__ = [
    "CleanupResponse",
    "ErrorResponse",
    "KPIListResponse",
    "LocalSyncResponse",
    "SeedRequest",
    "SeedResponse",
    "SheetDebugResponse",
    "SheetPreviewResponse",
    "SyncResponse",
    "UploadResponse",
]
