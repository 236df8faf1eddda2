"""
normalization/catalog.py

JSON-backed configuration tables: the indicator catalog (label variant ->
WeeklyRecord field) and the period denylist.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import cached_property, lru_cache
from pathlib import Path

from normalization.labels import normalize_label
from normalization.record import FIELDS_BY_NAME

DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_CATALOG_PATH = DATA_DIR / "indicator_catalog.json"
DEFAULT_DENYLIST_PATH = DATA_DIR / "period_denylist.json"


class CatalogError(ValueError):
    """Raised when a configuration table is missing or inconsistent."""


@dataclass(frozen=True)
class CatalogEntry:
    pattern: str
    field: str
    family: str


@dataclass(frozen=True)
class IndicatorCatalog:
    """
    Ordered pattern table with the two lookup views the resolver needs.
    """

    entries: tuple[CatalogEntry, ...]

    @cached_property
    def exact(self) -> dict[str, str]:
        return {entry.pattern: entry.field for entry in self.entries}

    @cached_property
    def longest_first(self) -> tuple[CatalogEntry, ...]:
        # sorted() is stable, so equal-length patterns keep table order.
        return tuple(sorted(self.entries, key=lambda entry: len(entry.pattern), reverse=True))

    def fields(self) -> set[str]:
        return {entry.field for entry in self.entries}


def _read_json(path: Path) -> object:
    if not path.exists():
        raise CatalogError(f"Configuration table not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Invalid JSON in {path}: {exc}") from exc


def build_catalog(families: dict[str, dict[str, list[str]]]) -> IndicatorCatalog:
    """
    Normalize and validate a ``{family: {field: [patterns]}}`` mapping.

    Raises CatalogError when a field is unknown or derived, or when one
    normalized pattern would map to two different fields.
    """

    seen: dict[str, str] = {}
    entries: list[CatalogEntry] = []
    for family, mapping in families.items():
        if not isinstance(mapping, dict):
            raise CatalogError(f"Catalog family '{family}' must be an object.")
        for field_name, patterns in mapping.items():
            spec = FIELDS_BY_NAME.get(field_name)
            if spec is None:
                raise CatalogError(f"Catalog maps to unknown field '{field_name}'.")
            if spec.derived:
                raise CatalogError(f"Catalog maps to derived field '{field_name}'.")
            if not isinstance(patterns, list):
                raise CatalogError(f"Patterns for '{field_name}' must be a list.")

            for raw_pattern in patterns:
                pattern = normalize_label(raw_pattern)
                if not pattern:
                    continue
                existing = seen.get(pattern)
                if existing is not None:
                    if existing != field_name:
                        raise CatalogError(
                            f"Pattern '{pattern}' maps to both '{existing}' and '{field_name}'."
                        )
                    continue
                seen[pattern] = field_name
                entries.append(CatalogEntry(pattern=pattern, field=field_name, family=family))

    return IndicatorCatalog(entries=tuple(entries))


@lru_cache(maxsize=8)
def load_indicator_catalog(path: str | None = None) -> IndicatorCatalog:
    """
    Load the indicator catalog from JSON, defaulting to the bundled table.
    """

    raw_data = _read_json(Path(path) if path else DEFAULT_CATALOG_PATH)
    families = raw_data.get("families") if isinstance(raw_data, dict) else None
    if not isinstance(families, dict):
        raise CatalogError("Invalid indicator catalog: 'families' must be an object.")
    return build_catalog(families)


@lru_cache(maxsize=8)
def load_period_denylist(path: str | None = None) -> tuple[str, ...]:
    """
    Load the period denylist terms, defaulting to the bundled table.
    """

    raw_data = _read_json(Path(path) if path else DEFAULT_DENYLIST_PATH)
    terms = raw_data.get("terms") if isinstance(raw_data, dict) else None
    if not isinstance(terms, list):
        raise CatalogError("Invalid period denylist: 'terms' must be a list.")
    return tuple(str(term).strip() for term in terms if str(term).strip())
