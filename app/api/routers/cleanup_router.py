"""
app/api/routers/cleanup_router.py

Data-quality sweep endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_record_repository
from app.repositories.weekly_record_repository import BackendError, WeeklyRecordRepository
from app.schemas.kpi import CleanupResponse, ErrorResponse
from app.services.cleanup_service import CleanupService, get_cleanup_service

router = APIRouter(prefix="/api", tags=["cleanup"])


@router.post("/cleanup", response_model=CleanupResponse, responses={500: {"model": ErrorResponse}})
def cleanup_invalid_periods(
    repository: WeeklyRecordRepository = Depends(get_record_repository),
    cleanup_service: CleanupService = Depends(get_cleanup_service),
) -> CleanupResponse:
    """
    Delete stored rows whose period fails validation.
    """

    try:
        outcome = cleanup_service.run(repository)
    except BackendError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return CleanupResponse(
        message=outcome.message,
        total=outcome.total,
        deleted=outcome.deleted,
        valid=outcome.valid,
        deleted_periods=outcome.deleted_periods,
    )
