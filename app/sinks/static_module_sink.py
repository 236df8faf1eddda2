"""
app/sinks/static_module_sink.py

Write normalized records as an importable Python data module for offline use.
"""

from __future__ import annotations

import logging
import pprint
from datetime import datetime, timezone
from pathlib import Path

from app.mappers.weekly_record_mapper import to_payload
from normalization.record import WeeklyRecord

logger = logging.getLogger(__name__)

_TEMPLATE = '''"""
Weekly KPI data generated from {source} at {generated_at}.

Regenerate with `python scripts/sync_local_data.py`; manual edits are overwritten.
"""

WEEKLY_DATA = {payload}
'''


def render_weekly_data_module(records: list[WeeklyRecord], *, source: str, generated_at: datetime | None = None) -> str:
    stamp = (generated_at or datetime.now(timezone.utc)).isoformat(timespec="seconds")
    payload = pprint.pformat([to_payload(record) for record in records], indent=4, width=100, sort_dicts=False)
    return _TEMPLATE.format(source=source, generated_at=stamp, payload=payload)


def write_weekly_data_module(records: list[WeeklyRecord], output_path: str | Path, *, source: str) -> Path:
    """
    Render ``records`` and write them to ``output_path``, creating parents.
    """

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_weekly_data_module(records, source=source), encoding="utf-8")
    logger.info("Static weekly data module written path=%s records=%s", path, len(records))
    return path
