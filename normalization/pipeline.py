"""
normalization/pipeline.py

Single normalization pipeline shared by the live sheet sync, the workbook
upload and the local file fallback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from normalization.assembler import AssemblyReport, assemble_records
from normalization.catalog import IndicatorCatalog, load_indicator_catalog
from normalization.finalize import finalize_records
from normalization.layout import SheetMatrix, detect_layout
from normalization.numbers import RescaleEvent, RescaleThresholds
from normalization.periods import PeriodPolicy, default_period_policy
from normalization.record import WeeklyRecord

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_EMPTY = "empty"


@dataclass
class PipelineResult:
    records: list[WeeklyRecord]
    status: str = STATUS_OK
    orientation: str | None = None
    duplicates: list[str] = field(default_factory=list)
    anomalies: list[str] = field(default_factory=list)
    unmatched_labels: dict[str, int] = field(default_factory=dict)
    implausible: list[dict[str, Any]] = field(default_factory=list)
    rescales: list[RescaleEvent] = field(default_factory=list)

    @property
    def periods(self) -> list[str]:
        return [record.period for record in self.records]

    def report(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "orientation": self.orientation,
            "duplicates": self.duplicates,
            "anomalies": self.anomalies,
            "unmatched_labels": self.unmatched_labels,
            "implausible": self.implausible,
            "rescales": [event.to_dict() for event in self.rescales],
        }


@dataclass
class NormalizationPipeline:
    """
    Matrix in, ordered and deduplicated WeeklyRecords out.

    Raises NoValidPeriodsError when the matrix has rows but no period.
    """

    policy: PeriodPolicy = field(default_factory=default_period_policy)
    catalog: IndicatorCatalog = field(default_factory=load_indicator_catalog)
    thresholds: RescaleThresholds = field(default_factory=RescaleThresholds)

    def run(self, matrix: SheetMatrix, today: date | None = None) -> PipelineResult:
        reference = today or date.today()
        if not matrix.rows:
            logger.info("Empty spreadsheet matrix columns=%s", len(matrix.columns))
            return PipelineResult(records=[], status=STATUS_EMPTY)

        layout = detect_layout(matrix, self.policy)
        report = AssemblyReport()
        records = assemble_records(
            layout,
            self.catalog,
            thresholds=self.thresholds,
            report=report,
        )
        finalized = finalize_records(records, reference)

        logger.info(
            "Pipeline run complete orientation=%s periods=%s duplicates=%s unmatched=%s implausible=%s rescales=%s",
            layout.orientation,
            len(finalized.records),
            len(finalized.duplicates),
            len(report.unmatched_labels),
            len(report.implausible),
            len(report.rescales),
        )
        return PipelineResult(
            records=finalized.records,
            orientation=layout.orientation,
            duplicates=finalized.duplicates,
            anomalies=finalized.anomalies,
            unmatched_labels=report.unmatched_labels,
            implausible=report.implausible,
            rescales=report.rescales,
        )
