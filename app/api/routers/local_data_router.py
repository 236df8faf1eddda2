"""
app/api/routers/local_data_router.py

Local workbook fallback endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas.kpi import ErrorResponse, LocalSyncResponse
from app.services.ingestion_service import (
    KPIIngestionService,
    LocalWorkbookNotFoundError,
    get_ingestion_service,
)
from app.sources.spreadsheet_reader import SpreadsheetDecodeError
from normalization.layout import NoValidPeriodsError

router = APIRouter(prefix="/api", tags=["local-data"])


@router.post(
    "/sync-local-data",
    response_model=LocalSyncResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def sync_local_data(
    ingestion_service: KPIIngestionService = Depends(get_ingestion_service),
) -> LocalSyncResponse:
    """
    Regenerate the static data module from the local workbook.
    """

    try:
        outcome = ingestion_service.sync_local_data()
    except LocalWorkbookNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except NoValidPeriodsError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": str(exc), "diagnostics": exc.diagnostics()},
        ) from exc
    except SpreadsheetDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return LocalSyncResponse(
        message=outcome.message,
        count=outcome.count,
        periods=outcome.periods,
        first_period=outcome.first_period,
        last_period=outcome.last_period,
    )
