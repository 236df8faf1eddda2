"""
frontend/formatting.py

Value formatting for the dashboard cards.

Percentages arrive already on the 0-100 scale from the API and are shown
as stored.
"""

from __future__ import annotations

from typing import Any


def _as_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def percent_label(value: Any, *, suffix: str = "") -> str:
    return f"{_as_float(value):.0f}%{suffix}"


def money_label(value: Any) -> str:
    return "R$ " + f"{_as_float(value):,.0f}".replace(",", ".")
