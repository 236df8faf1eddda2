"""
normalization/assembler.py

Build one WeeklyRecord per period column from labelled sheet rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from normalization.catalog import IndicatorCatalog
from normalization.labels import normalize_label
from normalization.layout import SheetLayout
from normalization.numbers import RescaleEvent, RescaleThresholds, coerce_number, parse_number
from normalization.record import FIELDS_BY_NAME, TEXT, FieldSpec, WeeklyRecord, compute_derived_fields
from normalization.resolver import resolve_indicator

logger = logging.getLogger(__name__)


@dataclass
class AssemblyReport:
    unmatched_labels: dict[str, int] = field(default_factory=dict)
    implausible: list[dict[str, Any]] = field(default_factory=list)
    rescales: list[RescaleEvent] = field(default_factory=list)


def is_blank_cell(value: object) -> bool:
    if value is None:
        return True
    text = str(value).strip()
    return text == "" or text == "-"


def _is_plausible(spec: FieldSpec, value: float) -> bool:
    if value < 0:
        return False
    return spec.cap is None or value <= spec.cap


def assemble_records(
    layout: SheetLayout,
    catalog: IndicatorCatalog,
    *,
    thresholds: RescaleThresholds | None = None,
    report: AssemblyReport | None = None,
) -> list[WeeklyRecord]:
    """
    Assemble records for every period column of ``layout``.

    Records start at field defaults. Each row's label picks the field, each
    column the period; when several rows map to one field the last one wins.
    Values failing a plausibility cap are reported and the previous value
    is kept. Derived fields are computed last.
    """

    active_report = report if report is not None else AssemblyReport()
    resolved: dict[str, str | None] = {}
    records = [WeeklyRecord(period=column.period) for column in layout.period_columns]

    for row in layout.rows:
        raw_label = row.get(layout.label_key) if layout.label_key else None
        label = normalize_label(raw_label)
        if not label:
            continue
        if label not in resolved:
            resolved[label] = resolve_indicator(label, catalog)
        field_name = resolved[label]

        if field_name is None:
            _note_unmatched(label, row, layout, active_report)
            continue

        spec = FIELDS_BY_NAME[field_name]
        for column, record in zip(layout.period_columns, records):
            cell = row.get(column.key)
            if is_blank_cell(cell):
                continue
            if spec.kind == TEXT:
                setattr(record, field_name, str(cell).strip())
                continue

            value = coerce_number(
                cell,
                spec.percentage,
                is_goal_percentage=spec.goal_percentage,
                thresholds=thresholds,
                audit=active_report.rescales,
                field=field_name,
                period=record.period,
            )
            if value is None:
                continue
            if not _is_plausible(spec, value):
                logger.warning(
                    "Implausible value discarded field=%s period=%s value=%s cap=%s",
                    field_name,
                    record.period,
                    value,
                    spec.cap,
                )
                active_report.implausible.append(
                    {
                        "period": record.period,
                        "field": field_name,
                        "value": value,
                        "cap": spec.cap,
                    }
                )
                continue
            setattr(record, field_name, value)

    for record in records:
        compute_derived_fields(record)
    return records


def _note_unmatched(
    label: str,
    row: dict[str, Any],
    layout: SheetLayout,
    report: AssemblyReport,
) -> None:
    has_numbers = any(
        not is_blank_cell(row.get(column.key)) and parse_number(row.get(column.key)) is not None
        for column in layout.period_columns
    )
    if not has_numbers:
        return
    if label not in report.unmatched_labels:
        logger.warning("Unmatched indicator label with numeric values label=%r", label)
        report.unmatched_labels[label] = 0
    report.unmatched_labels[label] += 1
