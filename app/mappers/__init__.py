"""
app/mappers package marker.
"""

from app.mappers.weekly_record_mapper import (
    ROW_COLUMNS,
    from_payload,
    from_row,
    to_payload,
    to_row,
)

__all__ = [
    "ROW_COLUMNS",
    "from_payload",
    "from_row",
    "to_payload",
    "to_row",
]
