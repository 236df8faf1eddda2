"""
app/services/filters.py

Dashboard filtering, free-text search and aggregate stats over WeeklyRecords.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta

from normalization.labels import strip_accents
from normalization.periods import find_day_months, resolve_period_start
from normalization.record import WeeklyRecord

ALL = "all"
LAST_30_DAYS = "last30days"
ABOVE = "above"
BELOW = "below"
EXACT = "exact"

MONTH_NAMES: dict[int, str] = {
    1: "Janeiro",
    2: "Fevereiro",
    3: "Março",
    4: "Abril",
    5: "Maio",
    6: "Junho",
    7: "Julho",
    8: "Agosto",
    9: "Setembro",
    10: "Outubro",
    11: "Novembro",
    12: "Dezembro",
}

_NUMERIC_QUERY_RE = re.compile(r"[^\d.]")
_DAY_RE = re.compile(r"\d{1,2}")
_RANGE_END_RE = re.compile(r"[aA]\s+(\d{1,2})/(\d{1,2})")


@dataclass(frozen=True)
class FilterState:
    period: str = ALL
    month: str = ALL
    pa_min: float | None = None
    pa_max: float | None = None
    n_min: float | None = None
    n_max: float | None = None
    performance_pa: str = ALL
    performance_n: str = ALL
    search_query: str | None = None


def month_from_period(period: str) -> str:
    """
    Portuguese month name of the first DD/MM fragment, or "".
    """

    fragments = find_day_months(period)
    if not fragments:
        return ""
    return MONTH_NAMES.get(fragments[0].month, "")


def percent_to_100(value: float | None) -> float:
    """
    Normalize a goal percentage to the 0-100 scale; values up to 2 are
    read as fractions.
    """

    if value is None:
        return 0.0
    if 0 <= value <= 2:
        return value * 100
    return value


def _start_date(record: WeeklyRecord, today: date) -> date | None:
    return record.period_start or resolve_period_start(record.period, today)


def _end_date(record: WeeklyRecord, today: date) -> date | None:
    start = _start_date(record, today)
    if start is None:
        return None
    match = _RANGE_END_RE.search(record.period)
    if match is None:
        return start
    end_day, end_month = int(match.group(1)), int(match.group(2))
    end_year = start.year + 1 if end_month < start.month else start.year
    try:
        return date(end_year, end_month, end_day)
    except ValueError:
        return start


def is_within_last_30_days(record: WeeklyRecord, today: date) -> bool:
    """
    True when the period's last day falls in the 30 days up to ``today``.
    """

    end = _end_date(record, today)
    if end is None:
        return False
    return today - timedelta(days=30) <= end <= today


def _matches_performance(value: float, mode: str) -> bool:
    normalized = percent_to_100(value)
    if mode == ABOVE:
        return normalized > 100
    if mode == BELOW:
        return normalized < 100
    if mode == EXACT:
        return 95 <= normalized <= 105
    return True


def _within(value: float, target: float, tolerance: float) -> bool:
    return target * (1 - tolerance) <= value <= target * (1 + tolerance)


def matches_search(record: WeeklyRecord, query: str | None) -> bool:
    """
    Free-text search over a record.

    Matches period substrings, numbers close to PA/N (10%) or to the goal
    percentages (5%), exact counts, keywords such as "acima da meta",
    month names and the first or last day of the period.
    """

    if not query:
        return True
    search = query.lower().strip()
    if not search:
        return True

    if search in record.period.lower():
        return True

    digits = _NUMERIC_QUERY_RE.sub("", search)
    try:
        numeric = float(digits) if digits else None
    except ValueError:
        numeric = None
    if numeric is not None and numeric > 0:
        if _within(record.pa_semanal, numeric, 0.10) or _within(record.n_semana, numeric, 0.10):
            return True
        if _within(record.percentual_meta_pa_semana, numeric, 0.05):
            return True
        if _within(record.percentual_meta_n_semana, numeric, 0.05):
            return True
        for count in (record.apolices_emitidas, record.ois_agendadas, record.ois_realizadas):
            if abs(count - numeric) < 0.5:
                return True

    p_pa = percent_to_100(record.percentual_meta_pa_semana)
    p_n = percent_to_100(record.percentual_meta_n_semana)
    keywords: dict[str, bool] = {
        "acima da meta": p_pa > 100 or p_n > 100,
        "abaixo da meta": p_pa < 100 or p_n < 100,
        "excelente": p_pa > 150 and p_n > 150,
        "alto pa": record.pa_semanal > 150_000,
        "baixo pa": record.pa_semanal < 80_000,
        "acima": p_pa > 100 or p_n > 100,
        "abaixo": p_pa < 100 or p_n < 100,
        "alto": record.pa_semanal > 150_000,
        "baixo": record.pa_semanal < 80_000,
        "ruim": p_pa < 80 or p_n < 80,
        "meta": p_pa >= 100 or p_n >= 100,
        "bom": p_pa >= 100 and p_n >= 100,
    }
    for keyword, condition in keywords.items():
        if keyword in search and condition:
            return True

    month = month_from_period(record.period)
    folded_month = strip_accents(month.lower())
    folded_search = strip_accents(search)
    if month and (folded_search in folded_month or folded_month in folded_search):
        return True

    day_match = _DAY_RE.search(search)
    if day_match:
        day = int(day_match.group(0))
        fragments = find_day_months(record.period)
        if fragments and (fragments[0].day == day or fragments[-1].day == day):
            return True

    return False


def filter_records(records: list[WeeklyRecord], filters: FilterState, today: date | None = None) -> list[WeeklyRecord]:
    """
    Apply every active filter in ``filters``; inactive ones are ``"all"``
    or None.
    """

    reference = today or date.today()
    filtered = list(records)

    if filters.period and filters.period != ALL:
        if filters.period == LAST_30_DAYS:
            filtered = [record for record in filtered if is_within_last_30_days(record, reference)]
        else:
            filtered = [record for record in filtered if record.period == filters.period]

    if filters.month and filters.month != ALL:
        wanted = strip_accents(filters.month.lower())
        filtered = [
            record
            for record in filtered
            if strip_accents(month_from_period(record.period).lower()) == wanted
        ]

    if filters.pa_min is not None:
        filtered = [record for record in filtered if record.pa_semanal >= filters.pa_min]
    if filters.pa_max is not None:
        filtered = [record for record in filtered if record.pa_semanal <= filters.pa_max]
    if filters.n_min is not None:
        filtered = [record for record in filtered if record.n_semana >= filters.n_min]
    if filters.n_max is not None:
        filtered = [record for record in filtered if record.n_semana <= filters.n_max]

    if filters.performance_pa and filters.performance_pa != ALL:
        filtered = [
            record
            for record in filtered
            if _matches_performance(record.percentual_meta_pa_semana, filters.performance_pa)
        ]
    if filters.performance_n and filters.performance_n != ALL:
        filtered = [
            record
            for record in filtered
            if _matches_performance(record.percentual_meta_n_semana, filters.performance_n)
        ]

    if filters.search_query:
        filtered = [record for record in filtered if matches_search(record, filters.search_query)]

    return filtered


def filter_stats(records: list[WeeklyRecord]) -> dict[str, float]:
    if not records:
        return {
            "count": 0,
            "avgPA": 0.0,
            "avgN": 0.0,
            "avgPerformancePA": 0.0,
            "avgPerformanceN": 0.0,
            "totalPA": 0.0,
        }

    count = len(records)
    total_pa = sum(record.pa_semanal for record in records)
    return {
        "count": count,
        "avgPA": total_pa / count,
        "avgN": sum(record.n_semana for record in records) / count,
        "avgPerformancePA": sum(percent_to_100(record.percentual_meta_pa_semana) for record in records) / count,
        "avgPerformanceN": sum(percent_to_100(record.percentual_meta_n_semana) for record in records) / count,
        "totalPA": total_pa,
    }
