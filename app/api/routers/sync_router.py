"""
app/api/routers/sync_router.py

Live Google Sheets endpoints: sync into storage, preview and debug.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_record_repository
from app.connectors.base import SourceUnavailableError
from app.mappers.weekly_record_mapper import to_payload
from app.repositories.weekly_record_repository import BackendError, WeeklyRecordRepository
from app.schemas.kpi import ErrorResponse, SheetDebugResponse, SheetPreviewResponse, SyncResponse
from app.services.ingestion_service import KPIIngestionService, get_ingestion_service
from app.sources.spreadsheet_reader import SpreadsheetDecodeError
from normalization.layout import NoValidPeriodsError

router = APIRouter(prefix="/api", tags=["google-sheets"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


def _source_error(exc: Exception) -> HTTPException:
    if isinstance(exc, SourceUnavailableError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    if isinstance(exc, NoValidPeriodsError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": str(exc), "diagnostics": exc.diagnostics()},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("/sync-sheets", response_model=SyncResponse, responses=_ERROR_RESPONSES)
def sync_sheets(
    repository: WeeklyRecordRepository = Depends(get_record_repository),
    ingestion_service: KPIIngestionService = Depends(get_ingestion_service),
) -> SyncResponse:
    """
    Fetch the published sheet, normalize it and upsert every period.
    """

    try:
        outcome = ingestion_service.sync_from_sheets(repository)
    except (SourceUnavailableError, SpreadsheetDecodeError, NoValidPeriodsError) as exc:
        raise _source_error(exc) from exc
    except BackendError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return SyncResponse(synced=outcome.synced, message=outcome.message, report=outcome.report)


@router.get("/google-sheets", response_model=SheetPreviewResponse, responses=_ERROR_RESPONSES)
def preview_google_sheets(
    ingestion_service: KPIIngestionService = Depends(get_ingestion_service),
) -> SheetPreviewResponse:
    """
    Normalize the live sheet without writing to storage.
    """

    try:
        result = ingestion_service.preview_sheets()
    except (SourceUnavailableError, SpreadsheetDecodeError, NoValidPeriodsError) as exc:
        raise _source_error(exc) from exc

    return SheetPreviewResponse(
        data=[to_payload(record) for record in result.records],
        count=len(result.records),
        periods=result.periods,
        report=result.report(),
    )


@router.get(
    "/google-sheets/debug",
    response_model=SheetDebugResponse,
    responses=_ERROR_RESPONSES,
)
def debug_google_sheets(
    ingestion_service: KPIIngestionService = Depends(get_ingestion_service),
) -> SheetDebugResponse:
    """
    Show what the live export looks like to the parser.
    """

    try:
        details = ingestion_service.debug_sheets()
    except (SourceUnavailableError, SpreadsheetDecodeError) as exc:
        raise _source_error(exc) from exc

    return SheetDebugResponse(**details)
