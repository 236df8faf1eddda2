"""
app/sources package marker.
"""

from app.sources.spreadsheet_reader import (
    SUPPORTED_EXTENSIONS,
    SpreadsheetDecodeError,
    read_csv_text,
    read_excel_bytes,
    read_spreadsheet,
)

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "SpreadsheetDecodeError",
    "read_csv_text",
    "read_excel_bytes",
    "read_spreadsheet",
]
