"""
app/mappers/weekly_record_mapper.py

Shape translation between WeeklyRecord, storage rows (snake_case) and API
payloads (camelCase). No business rules live here.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping

from normalization.numbers import parse_number
from normalization.record import FIELD_SPECS, TEXT, FieldSpec, WeeklyRecord

ROW_COLUMNS: tuple[str, ...] = ("period", "period_start") + tuple(spec.name for spec in FIELD_SPECS)


def _to_float(value: Any) -> float | None:
    """
    Tolerate stringified numbers from the backend or API callers.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return parse_number(text)


def _to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _to_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _field_value(spec: FieldSpec, value: Any) -> Any:
    if spec.kind == TEXT:
        return None if value is None else str(value)
    number = _to_float(value)
    return spec.default if number is None else number


def to_row(record: WeeklyRecord) -> dict[str, Any]:
    """
    Project a record onto the kpi_weekly_data columns, metadata excluded.
    """

    row: dict[str, Any] = {"period": record.period, "period_start": record.period_start}
    for spec in FIELD_SPECS:
        row[spec.name] = getattr(record, spec.name)
    return row


def from_row(row: Mapping[str, Any]) -> WeeklyRecord:
    """
    Build a record from a storage row.

    Missing required fields fall back to their defaults, missing optional
    fields stay None.
    """

    values = {spec.name: _field_value(spec, row.get(spec.name)) for spec in FIELD_SPECS}
    identifier = row.get("id")
    return WeeklyRecord(
        period=str(row.get("period") or ""),
        period_start=_to_date(row.get("period_start")),
        id=None if identifier is None else str(identifier),
        created_at=_to_datetime(row.get("created_at")),
        updated_at=_to_datetime(row.get("updated_at")),
        **values,
    )


def to_payload(record: WeeklyRecord) -> dict[str, Any]:
    """
    camelCase JSON shape served by the API. Unset optional fields are left
    out.
    """

    payload: dict[str, Any] = {}
    if record.id is not None:
        payload["id"] = record.id
    payload["period"] = record.period
    if record.period_start is not None:
        payload["periodStart"] = record.period_start.isoformat()
    for spec in FIELD_SPECS:
        value = getattr(record, spec.name)
        if value is None and not spec.required:
            continue
        payload[spec.api_name] = value
    if record.created_at is not None:
        payload["created_at"] = record.created_at.isoformat()
    if record.updated_at is not None:
        payload["updated_at"] = record.updated_at.isoformat()
    return payload


def from_payload(payload: Mapping[str, Any]) -> WeeklyRecord:
    """
    Parse a camelCase (or snake_case) record sent by an API caller.

    Raises ValueError when the period is missing.
    """

    period = str(payload.get("period") or "").strip()
    if not period:
        raise ValueError("Each record needs a non-empty 'period'.")

    values: dict[str, Any] = {}
    for spec in FIELD_SPECS:
        raw = payload.get(spec.api_name, payload.get(spec.name))
        values[spec.name] = _field_value(spec, raw)
    return WeeklyRecord(
        period=period,
        period_start=_to_date(payload.get("periodStart", payload.get("period_start"))),
        **values,
    )
