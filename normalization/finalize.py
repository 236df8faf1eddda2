"""
normalization/finalize.py

Duplicate-period collapsing and chronological ordering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from normalization.periods import resolve_period_start
from normalization.record import WeeklyRecord

logger = logging.getLogger(__name__)


@dataclass
class FinalizeResult:
    records: list[WeeklyRecord]
    duplicates: list[str] = field(default_factory=list)
    anomalies: list[str] = field(default_factory=list)


def period_key(period: str) -> str:
    return period.strip().lower()


def deduplicate(records: list[WeeklyRecord]) -> tuple[list[WeeklyRecord], list[str]]:
    """
    Keep the first record per case-insensitive trimmed period.

    Returns the kept records in input order and the dropped period labels.
    """

    seen: set[str] = set()
    kept: list[WeeklyRecord] = []
    dropped: list[str] = []
    for record in records:
        key = period_key(record.period)
        if key in seen:
            dropped.append(record.period)
            continue
        seen.add(key)
        kept.append(record)

    if dropped:
        logger.info("Duplicate periods dropped count=%s periods=%s", len(dropped), dropped)
    return kept, dropped


def sort_records(records: list[WeeklyRecord], today: date) -> tuple[list[WeeklyRecord], list[str]]:
    """
    Order records by period start date.

    Records without ``period_start`` get one resolved against ``today``.
    Records whose period has no DD/MM fragment are appended in lexical
    order and returned as anomalies.
    """

    dated: list[WeeklyRecord] = []
    undated: list[WeeklyRecord] = []
    for record in records:
        if record.period_start is None:
            record.period_start = resolve_period_start(record.period, today)
        if record.period_start is None:
            undated.append(record)
        else:
            dated.append(record)

    dated.sort(key=lambda record: record.period_start)
    undated.sort(key=lambda record: record.period)
    anomalies = [record.period for record in undated]
    if anomalies:
        logger.warning("Periods without a parsable date count=%s periods=%s", len(anomalies), anomalies)
    return dated + undated, anomalies


def finalize_records(records: list[WeeklyRecord], today: date) -> FinalizeResult:
    kept, duplicates = deduplicate(records)
    ordered, anomalies = sort_records(kept, today)
    return FinalizeResult(records=ordered, duplicates=duplicates, anomalies=anomalies)
