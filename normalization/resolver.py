"""
normalization/resolver.py

Map a normalized row/column label to a WeeklyRecord field.
"""

from __future__ import annotations

from normalization.catalog import IndicatorCatalog


def resolve_indicator(normalized_label: str, catalog: IndicatorCatalog) -> str | None:
    """
    Resolve a label produced by ``normalize_label`` against the catalog.

    Exact pattern matches win. Otherwise patterns are tried longest first and
    the first one that contains, or is contained in, the label is returned,
    so "meta de pcs c2 agendados" is considered before "pcs".
    """

    if not normalized_label:
        return None

    exact = catalog.exact.get(normalized_label)
    if exact is not None:
        return exact

    for entry in catalog.longest_first:
        if entry.pattern in normalized_label or normalized_label in entry.pattern:
            return entry.field
    return None
