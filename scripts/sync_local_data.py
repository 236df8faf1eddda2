"""
Regenerate the static weekly data module from the local workbook.
"""

from __future__ import annotations

import argparse
import json
import logging
import os

from app.services.ingestion_service import LocalWorkbookNotFoundError, get_ingestion_service
from app.sources.spreadsheet_reader import SpreadsheetDecodeError
from normalization.layout import NoValidPeriodsError


def main() -> int:
    parser = argparse.ArgumentParser(description="Normalize the local KPI workbook into a static data module.")
    parser.add_argument(
        "--workbook",
        dest="workbook",
        default=None,
        help="Workbook path. Defaults to LOCAL_KPI_WORKBOOK_PATH.",
    )
    parser.add_argument(
        "--output",
        dest="output",
        default=None,
        help="Generated module path. Defaults to LOCAL_KPI_OUTPUT_PATH.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = get_ingestion_service()
    try:
        outcome = service.sync_local_data(workbook_path=args.workbook, output_path=args.output)
    except LocalWorkbookNotFoundError as exc:
        print(json.dumps({"success": False, "error": str(exc)}, indent=2))
        return 2
    except NoValidPeriodsError as exc:
        print(json.dumps({"success": False, "error": str(exc), "diagnostics": exc.diagnostics()}, indent=2))
        return 1
    except SpreadsheetDecodeError as exc:
        print(json.dumps({"success": False, "error": str(exc)}, indent=2))
        return 1

    payload = {
        "success": True,
        "message": outcome.message,
        "count": outcome.count,
        "firstPeriod": outcome.first_period,
        "lastPeriod": outcome.last_period,
        "output": outcome.output_path,
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
