"""
app/sources/spreadsheet_reader.py

Decode CSV text and Excel workbooks into a SheetMatrix.

The first row is the header. Repeated headers get distinct column keys and
keep their text in ``SheetMatrix.labels`` so duplicate periods survive to
the deduplicator. Date cells are rendered as DD/MM/YYYY.
"""

from __future__ import annotations

import io
import logging
import zipfile
from datetime import date, datetime
from typing import Any

import pandas as pd

from normalization.layout import SheetMatrix

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xls")
CSV_EXTENSIONS = (".csv",)
SUPPORTED_EXTENSIONS = EXCEL_EXTENSIONS + CSV_EXTENSIONS
_DATE_FORMAT = "%d/%m/%Y"


class SpreadsheetDecodeError(ValueError):
    """
    Raised when a file cannot be decoded into rows and columns.
    """


def _cell_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return None
    if isinstance(value, (datetime, date)):
        return value.strftime(_DATE_FORMAT)
    if hasattr(value, "item"):
        return value.item()
    return value


def _header_text(value: Any, index: int) -> str:
    cell = _cell_value(value)
    if cell is None or str(cell).strip() == "":
        return f"column_{index + 1}"
    return str(cell).strip()


def frame_to_matrix(frame: pd.DataFrame) -> SheetMatrix:
    """
    Turn a header-less DataFrame into a SheetMatrix, first row as header.

    Fully blank rows are dropped.
    """

    if frame.empty:
        return SheetMatrix(columns=[], rows=[])

    header_values = list(frame.iloc[0])
    columns: list[str] = []
    labels: dict[str, str] = {}
    seen: dict[str, int] = {}
    for index, raw_header in enumerate(header_values):
        header = _header_text(raw_header, index)
        occurrence = seen.get(header, 0)
        seen[header] = occurrence + 1
        key = header if occurrence == 0 else f"{header}#{occurrence + 1}"
        columns.append(key)
        if key != header:
            labels[key] = header

    rows: list[dict[str, Any]] = []
    for values in frame.iloc[1:].itertuples(index=False, name=None):
        row = {key: _cell_value(value) for key, value in zip(columns, values)}
        if all(cell is None or str(cell).strip() == "" for cell in row.values()):
            continue
        rows.append(row)

    return SheetMatrix(columns=columns, rows=rows, labels=labels)


def read_csv_text(text: str) -> SheetMatrix:
    """
    Decode CSV text (comma separated, as exported by Google Sheets).
    """

    if not text.strip():
        return SheetMatrix(columns=[], rows=[])
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as exc:
        raise SpreadsheetDecodeError(f"Could not parse CSV content: {exc}") from exc

    matrix = frame_to_matrix(frame)
    logger.info("CSV decoded columns=%s rows=%s", len(matrix.columns), len(matrix.rows))
    return matrix


def read_excel_bytes(content: bytes, filename: str = "upload.xlsx") -> SheetMatrix:
    """
    Decode the first worksheet of an Excel workbook.
    """

    if not content:
        return SheetMatrix(columns=[], rows=[])
    engine = "openpyxl" if filename.lower().endswith(".xlsx") else None
    try:
        frame = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, engine=engine)
    except (ValueError, ImportError, OSError, KeyError, zipfile.BadZipFile) as exc:
        raise SpreadsheetDecodeError(f"Could not read workbook '{filename}': {exc}") from exc

    matrix = frame_to_matrix(frame)
    logger.info(
        "Workbook decoded filename=%s columns=%s rows=%s",
        filename,
        len(matrix.columns),
        len(matrix.rows),
    )
    return matrix


def read_spreadsheet(content: bytes, filename: str) -> SheetMatrix:
    """
    Dispatch on the file extension.
    """

    lowered = filename.lower()
    if lowered.endswith(EXCEL_EXTENSIONS):
        return read_excel_bytes(content, filename)
    if lowered.endswith(CSV_EXTENSIONS):
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError:
            text = content.decode("latin-1")
        return read_csv_text(text)
    raise SpreadsheetDecodeError(
        f"Unsupported file format: {filename}. Use .xlsx, .xls or .csv."
    )
