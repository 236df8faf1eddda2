"""
normalization/numbers.py

Cell value coercion for Brazilian and plain number formats, including the
percentage rescaling heuristic.

Source sheets mix "already x100" and "fraction" conventions across columns.
Every rescale is logged and, when an audit list is supplied, recorded as a
RescaleEvent so a wrong guess can be traced back to its cell.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import asdict, dataclass
from typing import Any

logger = logging.getLogger(__name__)

_NUMERIC_CHARS_RE = re.compile(r"[^\d.,]")


@dataclass(frozen=True)
class RescaleThresholds:
    """
    Tunable bounds of the percentage heuristic.

    - ``stored_x100_min``/``stored_x100_max``: integral values in this range
      are treated as accidentally multiplied by 100.
    - ``fraction_max``: values in (0, fraction_max) are fractions.
    - ``goal_fraction_max``: goal percentages in [1, goal_fraction_max] are
      fractions of the goal (1.5 means 150%).
    - ``small_percent_max``: values in [1, small_percent_max) written
      without a "%" sign are scaled up. The gate is the missing "%" sign,
      not the absence of decimal punctuation: "1,2" has a decimal comma and
      is still read as 120%, while "1,2%" stays 1.2.
    - ``overscaled_min``/``overscaled_max``: values in this range are
      divided by 100.
    - ``implausible_max``: percentage results above this are rejected.
    """

    stored_x100_min: float = 100.0
    stored_x100_max: float = 100_000.0
    fraction_max: float = 1.0
    goal_fraction_max: float = 2.0
    small_percent_max: float = 10.0
    overscaled_min: float = 1_000.0
    overscaled_max: float = 10_000.0
    implausible_max: float = 10_000.0


@dataclass(frozen=True)
class RescaleEvent:
    field: str | None
    period: str | None
    raw: str
    before: float
    after: float
    rule: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def parse_number(raw: object) -> float | None:
    """
    Parse a cell into a float without any rescaling.

    Strings keep only digits, "." and ",". With a comma present "." is a
    thousands separator and "," the decimal one ("114.668,50" -> 114668.5).
    Without a comma, more than one "." is read as thousands grouping
    ("1.234.567" -> 1234567).
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else None

    text = str(raw).strip()
    if not text:
        return None
    negative = text.startswith("-")
    cleaned = _NUMERIC_CHARS_RE.sub("", text)

    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")

    if not cleaned or cleaned == ".":
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return -value if negative else value


def coerce_number(
    raw: object,
    is_percentage_field: bool = False,
    *,
    is_goal_percentage: bool = False,
    thresholds: RescaleThresholds | None = None,
    audit: list[RescaleEvent] | None = None,
    field: str | None = None,
    period: str | None = None,
) -> float | None:
    """
    Convert a raw cell into a float, rescaling percentages.

    Returns None for empty, unparseable or implausible values.
    """

    value = parse_number(raw)
    if value is None:
        return None

    limits = thresholds or RescaleThresholds()
    has_percent_sign = isinstance(raw, str) and "%" in raw
    if not (is_percentage_field or has_percent_sign):
        return value

    raw_text = str(raw)

    def _record(before: float, after: float, rule: str) -> float:
        event = RescaleEvent(
            field=field,
            period=period,
            raw=raw_text,
            before=before,
            after=after,
            rule=rule,
        )
        logger.info(
            "Percentage rescaled field=%s period=%s raw=%r before=%s after=%s rule=%s",
            field,
            period,
            raw_text,
            before,
            after,
            rule,
        )
        if audit is not None:
            audit.append(event)
        return after

    if value == int(value) and limits.stored_x100_min <= value < limits.stored_x100_max:
        value = _record(value, value / 100, "stored_x100")

    if is_percentage_field:
        if 0 < value < limits.fraction_max:
            value = _record(value, value * 100, "fraction")
        elif is_goal_percentage and 1 <= value <= limits.goal_fraction_max:
            value = _record(value, value * 100, "goal_fraction")
        elif 1 <= value < limits.small_percent_max and not has_percent_sign:
            value = _record(value, value * 100, "small_percent")
        elif limits.overscaled_min <= value < limits.overscaled_max:
            value = _record(value, value / 100, "overscaled")

    if value > limits.implausible_max:
        logger.warning(
            "Implausible percentage rejected field=%s period=%s raw=%r value=%s",
            field,
            period,
            raw_text,
            value,
        )
        return None
    return value
