"""
app/schemas/kpi.py

Request and response schemas for the weekly KPI endpoints.

Records travel as camelCase dictionaries produced by the persistence
adapter; envelope fields use the camelCase names the dashboard expects.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """
    Body of every failed request.
    """

    success: bool = False
    error: str
    diagnostics: dict[str, Any] | None = None


class KPIListResponse(_CamelModel):
    success: bool = True
    data: list[dict[str, Any]] = Field(default_factory=list)
    count: int = Field(..., ge=0)
    periods: list[str] = Field(default_factory=list)
    stats: dict[str, float] | None = None
    meta: dict[str, str] | None = Field(default=None, alias="_meta")


class SeedRequest(BaseModel):
    data: list[dict[str, Any]] = Field(default_factory=list)


class SeedResponse(BaseModel):
    success: bool = True
    message: str
    synced: int = Field(..., ge=0)


class SyncResponse(BaseModel):
    success: bool = True
    synced: int = Field(..., ge=0)
    message: str
    report: dict[str, Any] | None = None


class SheetPreviewResponse(BaseModel):
    success: bool = True
    data: list[dict[str, Any]] = Field(default_factory=list)
    count: int = Field(..., ge=0)
    periods: list[str] = Field(default_factory=list)
    report: dict[str, Any] | None = None


class SheetDebugResponse(_CamelModel):
    success: bool = True
    csv_length: int = Field(..., ge=0, alias="csvLength")
    csv_preview: str = Field(..., alias="csvPreview")
    columns: list[str] = Field(default_factory=list)
    row_count: int = Field(..., ge=0, alias="rowCount")
    sample_rows: list[dict[str, Any]] = Field(default_factory=list, alias="sampleRows")
    period_headers: list[str] = Field(default_factory=list, alias="periodHeaders")
    candidate_period_columns: list[dict[str, Any]] = Field(default_factory=list, alias="candidatePeriodColumns")


class UploadResponse(_CamelModel):
    success: bool = True
    inserted: int = Field(..., ge=0)
    updated: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    duplicates_in_file: list[str] | None = Field(default=None, alias="duplicatesInFile")
    updated_periods: list[str] | None = Field(default=None, alias="updatedPeriods")
    message: str
    report: dict[str, Any] | None = None


class CleanupResponse(_CamelModel):
    message: str
    total: int = Field(..., ge=0)
    deleted: int = Field(..., ge=0)
    valid: int = Field(..., ge=0)
    deleted_periods: list[str] = Field(default_factory=list, alias="deletedPeriods")


class LocalSyncResponse(_CamelModel):
    success: bool = True
    message: str
    count: int = Field(..., ge=0)
    periods: list[str] = Field(default_factory=list)
    first_period: str | None = Field(default=None, alias="firstPeriod")
    last_period: str | None = Field(default=None, alias="lastPeriod")
