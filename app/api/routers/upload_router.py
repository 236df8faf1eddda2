"""
app/api/routers/upload_router.py

Spreadsheet upload endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import get_record_repository, get_spreadsheet_upload
from app.repositories.weekly_record_repository import BackendError, WeeklyRecordRepository
from app.schemas.kpi import ErrorResponse, UploadResponse
from app.services.ingestion_service import KPIIngestionService, get_ingestion_service
from app.sources.spreadsheet_reader import SpreadsheetDecodeError
from normalization.layout import NoValidPeriodsError
from normalization.pipeline import STATUS_EMPTY

router = APIRouter(prefix="/api", tags=["upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def upload_spreadsheet(
    file: UploadFile = Depends(get_spreadsheet_upload),
    repository: WeeklyRecordRepository = Depends(get_record_repository),
    ingestion_service: KPIIngestionService = Depends(get_ingestion_service),
) -> UploadResponse:
    """
    Normalize one uploaded workbook and upsert its periods.
    """

    try:
        outcome = ingestion_service.ingest_upload(
            content=file.file.read(),
            filename=file.filename or "upload.xlsx",
            store=repository,
        )
    except NoValidPeriodsError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": str(exc), "diagnostics": exc.diagnostics()},
        ) from exc
    except SpreadsheetDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except BackendError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    finally:
        file.file.close()

    if outcome.status == STATUS_EMPTY:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=outcome.message)

    return UploadResponse(
        inserted=outcome.inserted,
        updated=outcome.updated,
        total=outcome.total,
        duplicates_in_file=outcome.duplicates_in_file or None,
        updated_periods=outcome.updated_periods or None,
        message=outcome.message,
        report=outcome.report,
    )
