"""Tests for report formatting and export."""

import csv
import io
import json

from datetime import datetime

import pytest

from xedeadlock.constants import REPORT_COLUMNS, REPORT_LEGEND
from xedeadlock.models.report import CorrelatedPair, DeadlockReport
from xedeadlock.report.export import export_report_csv, export_report_json
from xedeadlock.report.formatting import (
    format_event_time,
    format_report,
    format_table,
    truncate,
)


@pytest.fixture
def report(t0):
    return DeadlockReport(
        pairs=[
            CorrelatedPair(
                event_time=t0,
                blocker_session=61,
                victim_session=54,
                query="BEGIN TRAN;\nUPDATE dbo.Orders SET Status = 'x'",
                locked_object="Sales.dbo.Orders",
                lock_mode="X",
                lock_type="X",
            ),
            CorrelatedPair(
                event_time=t0,
                blocker_session=65,
                victim_session=70,
                query="N/A",
                locked_object="N/A",
                lock_mode="N/A",
                lock_type=None,
            ),
        ],
        sources=["/logs/*.xml"],
        events_read=3,
        events_skipped=1,
    )


class TestFormatting:
    """Tests for text rendering."""

    def test_event_time_milliseconds(self, t0):
        assert format_event_time(t0) == "2024-03-01 10:15:42.123"

    def test_truncate(self):
        assert truncate("short", 10) == "short"
        assert truncate("a" * 20, 10) == "aaaaaaa..."
        assert len(truncate("a" * 20, 10)) == 10

    def test_table_header_and_rows(self, report):
        lines = format_table(report.pairs)

        assert lines[0].split() == list(REPORT_COLUMNS)
        assert set(lines[1].replace(" ", "")) == {"-"}
        assert len(lines) == 4
        assert "Sales.dbo.Orders" in lines[2]

    def test_query_collapsed_to_one_line(self, report):
        lines = format_table(report.pairs, query_width=None)
        assert "BEGIN TRAN; UPDATE dbo.Orders SET Status = 'x'" in lines[2]

    def test_query_truncated(self, report):
        lines = format_table(report.pairs, query_width=12)
        assert "BEGIN TRA..." in lines[2]
        assert "UPDATE" not in lines[2]

    def test_missing_lock_type_is_blank(self, report):
        line = format_table(report.pairs)[3]
        assert line.rstrip().endswith("N/A")

    def test_report_includes_legend(self, report):
        text = format_report(report)
        for note in REPORT_LEGEND:
            assert note in text
        assert text.index("EventTime") < text.index(REPORT_LEGEND[0])

    def test_report_without_legend(self, report):
        text = format_report(report, include_legend=False)
        assert REPORT_LEGEND[0] not in text

    def test_empty_report(self):
        text = format_report(DeadlockReport(), include_legend=False)
        assert "EventTime" in text
        assert "(no deadlocks found)" in text


class TestExport:
    """Tests for JSON and CSV export."""

    def test_json(self, report):
        buffer = io.StringIO()
        export_report_json(report, buffer)
        document = json.loads(buffer.getvalue())

        assert document["events_read"] == 3
        assert document["events_skipped"] == 1
        assert document["legend"] == list(REPORT_LEGEND)
        first = document["pairs"][0]
        assert list(first) == list(REPORT_COLUMNS)
        assert first["EventTime"] == "2024-03-01T10:15:42.123000"
        assert first["BlockerSession"] == 61
        assert document["pairs"][1]["LockType"] is None

    def test_csv(self, report):
        buffer = io.StringIO()
        export_report_csv(report, buffer)
        rows = list(csv.DictReader(io.StringIO(buffer.getvalue())))

        assert len(rows) == 2
        assert rows[0]["EventTime"] == "2024-03-01 10:15:42.123"
        assert rows[0]["BlockerSession"] == "61"
        assert rows[0]["Query"].startswith("BEGIN TRAN;\n")
        assert rows[1]["LockType"] == ""
