"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from functools import lru_cache
from pathlib import Path

from db.config import PROJECT_ROOT, load_env_files
from normalization.catalog import DEFAULT_CATALOG_PATH, DEFAULT_DENYLIST_PATH
from normalization.numbers import RescaleThresholds
from normalization.periods import DEFAULT_MAX_LENGTH, DEFAULT_MIN_LENGTH

DEFAULT_GOOGLE_SHEETS_CSV_URL = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vSQk309WH9kRymm3yLfzMluGJLRgAjMtWiil22Du0UGwdS55YOafE0C-EVCNiKKkw"
    "/pub?gid=1893200293&single=true&output=csv"
)
DEFAULT_USER_AGENT = "WeeklyKPIDashboard/1.0 (+sheet-sync)"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _resolve_path(raw_path: str | Path) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (PROJECT_ROOT / candidate).resolve()


@dataclass(frozen=True)
class GoogleSheetsSettings:
    """
    Upstream published-CSV settings.
    """

    csv_url: str = DEFAULT_GOOGLE_SHEETS_CSV_URL
    timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    bootstrap_on_empty_read: bool = True


@dataclass(frozen=True)
class NormalizationSettings:
    """
    Period policy bounds, configuration table paths and rescale thresholds.
    """

    period_min_length: int = DEFAULT_MIN_LENGTH
    period_max_length: int = DEFAULT_MAX_LENGTH
    allow_range_fallback: bool = True
    catalog_path: str = str(DEFAULT_CATALOG_PATH)
    denylist_path: str = str(DEFAULT_DENYLIST_PATH)
    thresholds: RescaleThresholds = field(default_factory=RescaleThresholds)


@dataclass(frozen=True)
class LocalDataSettings:
    """
    Offline fallback: local workbook in, static data module out.
    """

    workbook_path: str
    output_path: str


@lru_cache(maxsize=1)
def get_google_sheets_settings() -> GoogleSheetsSettings:
    """
    Return cached Google Sheets connector settings from environment variables.
    """

    return GoogleSheetsSettings(
        csv_url=_get_str_env("GOOGLE_SHEETS_CSV_URL", DEFAULT_GOOGLE_SHEETS_CSV_URL),
        timeout_seconds=max(1.0, _get_float_env("GOOGLE_SHEETS_TIMEOUT_SECONDS", 30.0)),
        user_agent=_get_str_env("GOOGLE_SHEETS_USER_AGENT", DEFAULT_USER_AGENT),
        bootstrap_on_empty_read=_get_bool_env("KPI_BOOTSTRAP_FROM_SHEETS", True),
    )


def _rescale_thresholds_from_env() -> RescaleThresholds:
    defaults = RescaleThresholds()
    overrides = {
        item.name: _get_float_env(f"PERCENT_RESCALE_{item.name.upper()}", getattr(defaults, item.name))
        for item in fields(RescaleThresholds)
    }
    return RescaleThresholds(**overrides)


@lru_cache(maxsize=1)
def get_normalization_settings() -> NormalizationSettings:
    """
    Return cached normalization settings from environment variables.

    PERCENT_RESCALE_<THRESHOLD> overrides any RescaleThresholds field, e.g.
    PERCENT_RESCALE_IMPLAUSIBLE_MAX=5000.
    """

    min_length = max(1, _get_int_env("PERIOD_MIN_LENGTH", DEFAULT_MIN_LENGTH))
    return NormalizationSettings(
        period_min_length=min_length,
        period_max_length=max(min_length, _get_int_env("PERIOD_MAX_LENGTH", DEFAULT_MAX_LENGTH)),
        allow_range_fallback=_get_bool_env("PERIOD_ALLOW_RANGE_FALLBACK", True),
        catalog_path=str(_resolve_path(_get_str_env("INDICATOR_CATALOG_PATH", str(DEFAULT_CATALOG_PATH)))),
        denylist_path=str(_resolve_path(_get_str_env("PERIOD_DENYLIST_PATH", str(DEFAULT_DENYLIST_PATH)))),
        thresholds=_rescale_thresholds_from_env(),
    )


@lru_cache(maxsize=1)
def get_local_data_settings() -> LocalDataSettings:
    """
    Return cached local-file fallback paths from environment variables.
    """

    return LocalDataSettings(
        workbook_path=str(_resolve_path(_get_str_env("LOCAL_KPI_WORKBOOK_PATH", "KPI DASH - Legatum.xlsx"))),
        output_path=str(_resolve_path(_get_str_env("LOCAL_KPI_OUTPUT_PATH", "data/weekly_data.py"))),
    )
