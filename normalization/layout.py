"""
normalization/layout.py

Sheet orientation detection.

Weekly sheets come either with one period per column (indicator names down
the first column) or one period per row (indicator names as headers and a
"Período"/"Semana"/"Data" column). Both are reduced to the per-column form
the assembler consumes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from normalization.labels import normalize_label
from normalization.periods import PeriodPolicy, is_valid_period, normalize_period

LABEL_KEY = "__label__"
COLUMNS = "columns"
ROWS = "rows"

_PERIOD_HINTS = ("periodo", "period", "semana", "data", "week", "intervalo", "range")
_DATE_LIKE_RE = re.compile(r"\d.*[/-].*\d|\d{4}-w", re.IGNORECASE)
_SAMPLE_SIZE = 3


@dataclass
class SheetMatrix:
    """
    A decoded spreadsheet: ordered column keys and rows keyed by them.

    ``labels`` maps a column key to its header text when the two differ,
    which happens when a sheet repeats a header.
    """

    columns: list[str]
    rows: list[dict[str, Any]]
    labels: dict[str, str] = field(default_factory=dict)

    def label(self, column: str) -> str:
        return self.labels.get(column, column)


@dataclass(frozen=True)
class PeriodColumn:
    key: str
    raw: str
    period: str


@dataclass
class SheetLayout:
    orientation: str
    label_key: str | None
    period_columns: list[PeriodColumn]
    rows: list[dict[str, Any]] = field(default_factory=list)


class NoValidPeriodsError(Exception):
    """
    Raised when no header or column holds a valid period.
    """

    def __init__(self, columns: list[str], candidate_columns: list[dict[str, Any]]) -> None:
        self.columns = columns
        self.candidate_columns = candidate_columns
        super().__init__("No valid period columns were found in the spreadsheet.")

    def diagnostics(self) -> dict[str, Any]:
        return {
            "columns": self.columns,
            "candidate_columns": self.candidate_columns,
            "hint": (
                "Expected period headers such as '18/08 a 24/08', or a "
                "'Período'/'Semana' column holding them."
            ),
        }


def _samples(rows: list[dict[str, Any]], column: str) -> list[str]:
    values: list[str] = []
    for row in rows:
        value = row.get(column)
        if value is None or str(value).strip() == "":
            continue
        values.append(str(value).strip())
        if len(values) >= _SAMPLE_SIZE:
            break
    return values


def _has_period_hint(column: str) -> bool:
    key = normalize_label(column)
    return any(hint in key for hint in _PERIOD_HINTS)


def candidate_period_columns(matrix: SheetMatrix) -> list[dict[str, Any]]:
    """
    Columns that look date-like by header or values, with sample values.
    """

    candidates: list[dict[str, Any]] = []
    for column in matrix.columns:
        header = matrix.label(column)
        samples = _samples(matrix.rows, column)
        if (
            _has_period_hint(header)
            or _DATE_LIKE_RE.search(header)
            or any(_DATE_LIKE_RE.search(value) for value in samples)
        ):
            candidates.append({"column": header, "samples": samples})
    return candidates


def _period_count(matrix: SheetMatrix, column: str, policy: PeriodPolicy | None) -> int:
    return sum(1 for row in matrix.rows if is_valid_period(row.get(column), policy))


def detect_layout(matrix: SheetMatrix, policy: PeriodPolicy | None = None) -> SheetLayout:
    """
    Return the per-column view of ``matrix``.

    Raises NoValidPeriodsError with diagnostics when neither orientation
    yields a period.
    """

    period_headers = [column for column in matrix.columns if is_valid_period(matrix.label(column), policy)]
    if period_headers:
        label_key = next(
            (column for column in matrix.columns if column not in period_headers),
            None,
        )
        return SheetLayout(
            orientation=COLUMNS,
            label_key=label_key,
            period_columns=[
                PeriodColumn(
                    key=column,
                    raw=matrix.label(column),
                    period=normalize_period(matrix.label(column)),
                )
                for column in period_headers
            ],
            rows=matrix.rows,
        )

    period_column = _find_period_column(matrix, policy)
    if period_column is None:
        raise NoValidPeriodsError(
            columns=[matrix.label(column) for column in matrix.columns],
            candidate_columns=candidate_period_columns(matrix),
        )
    return _transpose(matrix, period_column, policy)


def _find_period_column(matrix: SheetMatrix, policy: PeriodPolicy | None) -> str | None:
    counts = {column: _period_count(matrix, column, policy) for column in matrix.columns}
    hinted = [column for column in matrix.columns if counts[column] and _has_period_hint(matrix.label(column))]
    pool = hinted or [column for column in matrix.columns if counts[column]]
    if not pool:
        return None
    return max(pool, key=lambda column: counts[column])


def _transpose(matrix: SheetMatrix, period_column: str, policy: PeriodPolicy | None) -> SheetLayout:
    period_columns: list[PeriodColumn] = []
    source_rows: list[dict[str, Any]] = []
    for index, row in enumerate(matrix.rows):
        raw = row.get(period_column)
        if not is_valid_period(raw, policy):
            continue
        period_columns.append(PeriodColumn(key=f"row{index}", raw=str(raw), period=normalize_period(raw)))
        source_rows.append(row)

    rows: list[dict[str, Any]] = []
    for column in matrix.columns:
        if column == period_column:
            continue
        transposed: dict[str, Any] = {LABEL_KEY: matrix.label(column)}
        for period_col, source_row in zip(period_columns, source_rows):
            transposed[period_col.key] = source_row.get(column)
        rows.append(transposed)

    return SheetLayout(
        orientation=ROWS,
        label_key=LABEL_KEY,
        period_columns=period_columns,
        rows=rows,
    )
