"""
Report export.

Provides functionality to export deadlock reports in JSON and CSV formats.
"""

import csv
import json

from datetime import datetime
from typing import Any, TextIO

from xedeadlock.constants import REPORT_COLUMNS
from xedeadlock.models.report import DeadlockReport
from xedeadlock.report.formatting import format_cell


def _json_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def export_report_json(report: DeadlockReport, stream: TextIO) -> None:
    """
    Export a deadlock report as JSON.

    Pairs are written with the report column names as keys, followed by the
    legend and run statistics.

    Args:
        report: Report to export
        stream: Text stream to write to
    """
    document = {
        "pairs": [
            {column: _json_value(value) for column, value in pair.as_row().items()}
            for pair in report.pairs
        ],
        "legend": list(report.legend),
        "sources": report.sources,
        "events_read": report.events_read,
        "events_skipped": report.events_skipped,
        "start_time": _json_value(report.start_time),
        "end_time": _json_value(report.end_time),
    }
    json.dump(document, stream, indent=2)
    stream.write("\n")


def export_report_csv(report: DeadlockReport, stream: TextIO) -> None:
    """
    Export the report's pairs as CSV.

    The legend is not written; CSV output is meant for loading into other
    tools.

    Args:
        report: Report to export
        stream: Text stream to write to
    """
    writer = csv.DictWriter(stream, fieldnames=list(REPORT_COLUMNS))
    writer.writeheader()

    for pair in report.pairs:
        writer.writerow(
            {column: format_cell(value) for column, value in pair.as_row().items()}
        )
