"""
normalization/periods.py

Period label validation, normalization and calendar resolution.

A period is the label of one weekly column/row, canonically "DD/MM a DD/MM".
Validation is a conjunction of a length bound, a digit requirement, an
explicit denylist of business words that share cells with numbers, a set of
accepted shapes and a day/month plausibility check.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache

from normalization.catalog import load_period_denylist
from normalization.labels import strip_accents

DEFAULT_MIN_LENGTH = 8
DEFAULT_MAX_LENGTH = 25

_WHITESPACE_RE = re.compile(r"\s+")
_CONNECTOR_RE = re.compile(r"(?<=\d)\s*[aA]\s*(?=\d)")
_DAY_MONTH_RE = re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})(?:/(\d{4}|\d{2}))?(?!\d)")
_RANGE_RE = re.compile(r"\d{1,2}/\d{1,2}(?:/\d{2,4})?\s+a\s+\d{1,2}/\d{1,2}", re.IGNORECASE)
_ISO_WEEK_RE = re.compile(r"(?<!\d)\d{4}-w(\d{1,2})(?!\d)", re.IGNORECASE)
_CONNECTOR_WORD_RE = re.compile(r"\ba\b", re.IGNORECASE)
_DIGIT_RE = re.compile(r"\d")


@dataclass(frozen=True)
class PeriodPolicy:
    """
    Validation policy for period labels.

    ``allow_range_fallback`` accepts any label holding a "/", a digit and the
    connector word "a" even without a DD/MM fragment. It admits false
    positives such as "1/ a 2" and is kept for parity with sheets that write
    ranges loosely.
    """

    min_length: int = DEFAULT_MIN_LENGTH
    max_length: int = DEFAULT_MAX_LENGTH
    denylist: tuple[str, ...] = field(default_factory=load_period_denylist)
    allow_range_fallback: bool = True

    def __post_init__(self) -> None:
        folded = tuple(
            dict.fromkeys(strip_accents(term.strip().lower()) for term in self.denylist if term.strip())
        )
        object.__setattr__(self, "denylist", folded)


@dataclass(frozen=True)
class DayMonth:
    day: int
    month: int
    year: int | None = None


def normalize_period(raw: object) -> str:
    """
    Trim, collapse whitespace and standardize the range connector to " a ".

    Slash-separated date tokens are preserved verbatim.
    """

    if raw is None:
        return ""
    text = _WHITESPACE_RE.sub(" ", str(raw).strip())
    return _CONNECTOR_RE.sub(" a ", text)


def find_day_months(period: str) -> list[DayMonth]:
    """
    Return every DD/MM(/YYYY) fragment of a period label, in order.
    """

    fragments: list[DayMonth] = []
    for day_raw, month_raw, year_raw in _DAY_MONTH_RE.findall(period):
        year: int | None = None
        if year_raw:
            year = int(year_raw)
            if year < 100:
                year += 2000
        fragments.append(DayMonth(day=int(day_raw), month=int(month_raw), year=year))
    return fragments


def is_valid_period(raw: object, policy: PeriodPolicy | None = None) -> bool:
    """
    Decide whether a header/cell value denotes a period.

    Validation runs on the normalized form, so a valid label stays valid
    after ``normalize_period``.
    """

    if raw is None:
        return False
    active = policy or default_period_policy()
    candidate = normalize_period(raw)

    if not active.min_length <= len(candidate) <= active.max_length:
        return False
    if not _DIGIT_RE.search(candidate):
        return False

    folded = strip_accents(candidate.lower())
    if any(term in folded for term in active.denylist):
        return False

    fragments = find_day_months(candidate)
    for fragment in fragments:
        if not (1 <= fragment.day <= 31 and 1 <= fragment.month <= 12):
            return False

    week_match = _ISO_WEEK_RE.search(candidate)
    if week_match and not 1 <= int(week_match.group(1)) <= 53:
        return False

    if fragments or _RANGE_RE.search(candidate) or week_match:
        return True

    return bool(
        active.allow_range_fallback
        and "/" in candidate
        and _CONNECTOR_WORD_RE.search(candidate)
    )


def infer_year(month: int, today: date) -> int:
    """
    Infer the calendar year of a DD/MM label relative to ``today``.

    December seen in January/February belongs to the previous year, January
    seen in December to the next one, months still ahead of ``today`` to the
    previous year and everything else to the current year.
    """

    if month == 12:
        return today.year - 1 if today.month <= 2 else today.year
    if month == 1:
        return today.year + 1 if today.month == 12 else today.year
    if month > today.month:
        return today.year - 1
    return today.year


def resolve_period_start(period: str, today: date) -> date | None:
    """
    Resolve the first DD/MM fragment of ``period`` into a concrete date.

    An explicit year in the label wins over inference. Returns None when the
    label has no parsable fragment or names an impossible day.
    """

    fragments = find_day_months(period)
    if not fragments:
        return None

    first = fragments[0]
    year = first.year if first.year is not None else infer_year(first.month, today)
    try:
        return date(year, first.month, first.day)
    except ValueError:
        return None


@lru_cache(maxsize=1)
def default_period_policy() -> PeriodPolicy:
    """
    Return the policy built from the bundled denylist and default bounds.
    """

    return PeriodPolicy()
