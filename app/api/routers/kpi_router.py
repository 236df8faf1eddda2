"""
app/api/routers/kpi_router.py

Read and seed endpoints for weekly KPI records.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_record_repository
from app.mappers.weekly_record_mapper import to_payload
from app.repositories.weekly_record_repository import BackendError, WeeklyRecordRepository
from app.schemas.kpi import ErrorResponse, KPIListResponse, SeedRequest, SeedResponse
from app.services.filters import ALL, FilterState, filter_records, filter_stats
from app.services.ingestion_service import (
    InvalidSeedPayloadError,
    KPIIngestionService,
    get_ingestion_service,
)

router = APIRouter(prefix="/api", tags=["kpi"])


@router.get(
    "/kpi",
    response_model=KPIListResponse,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
)
def list_kpi_records(
    period: str = Query(default=ALL, description="Exact period label, 'last30days' or 'all'"),
    month: str = Query(default=ALL, description="Portuguese month name, e.g. 'Agosto'"),
    pa_min: float | None = Query(default=None, alias="paMin"),
    pa_max: float | None = Query(default=None, alias="paMax"),
    n_min: float | None = Query(default=None, alias="nMin"),
    n_max: float | None = Query(default=None, alias="nMax"),
    performance_pa: str = Query(default=ALL, alias="performancePA", pattern="^(all|above|below|exact)$"),
    performance_n: str = Query(default=ALL, alias="performanceN", pattern="^(all|above|below|exact)$"),
    search: str | None = Query(default=None, alias="q", description="Free-text search"),
    repository: WeeklyRecordRepository = Depends(get_record_repository),
    ingestion_service: KPIIngestionService = Depends(get_ingestion_service),
) -> KPIListResponse:
    """
    Return stored records in chronological order, optionally filtered.
    """

    try:
        outcome = ingestion_service.load_records(repository)
    except BackendError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": str(exc), "data": []},
        ) from exc

    filters = FilterState(
        period=period,
        month=month,
        pa_min=pa_min,
        pa_max=pa_max,
        n_min=n_min,
        n_max=n_max,
        performance_pa=performance_pa,
        performance_n=performance_n,
        search_query=search,
    )
    records = filter_records(outcome.records, filters)
    return KPIListResponse(
        data=[to_payload(record) for record in records],
        count=len(records),
        periods=[record.period for record in records],
        stats=filter_stats(records),
        meta=outcome.meta or None,
    )


@router.post(
    "/kpi",
    response_model=SeedResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def seed_kpi_records(
    body: SeedRequest,
    repository: WeeklyRecordRepository = Depends(get_record_repository),
    ingestion_service: KPIIngestionService = Depends(get_ingestion_service),
) -> SeedResponse:
    """
    Upsert caller-supplied records keyed by period.
    """

    try:
        result = ingestion_service.seed(body.data, repository)
    except InvalidSeedPayloadError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except BackendError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": str(exc), "synced": 0},
        ) from exc

    return SeedResponse(message=f"{result.total} records saved.", synced=result.total)
