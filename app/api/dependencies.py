"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and repository access.
"""

from __future__ import annotations

from fastapi import Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.repositories.weekly_record_repository import WeeklyRecordRepository
from app.sources.spreadsheet_reader import SUPPORTED_EXTENSIONS
from db.session import get_db

SPREADSHEET_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def get_spreadsheet_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Accept .xlsx, .xls and .csv uploads by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    if not filename.endswith(SUPPORTED_EXTENSIONS) and content_type not in SPREADSHEET_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .xlsx, .xls or .csv spreadsheets are accepted.",
        )

    return file


def get_record_repository(db: Session = Depends(get_db)) -> WeeklyRecordRepository:
    return WeeklyRecordRepository(db)
