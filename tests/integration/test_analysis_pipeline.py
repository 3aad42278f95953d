"""
End-to-end tests for the deadlock analysis pipeline.

These tests run DeadlockAnalysisService over real trace files:
- The exported system_health sample fixture
- Rotated synthetic trace files with controlled attributes
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from tests.helpers.synthetic_data import (
    deadlock_xml,
    event_xml,
    process_xml,
    resource_xml,
    simple_deadlock_event,
)
from xedeadlock.analysis.service import DeadlockAnalysisService
from xedeadlock.analysis.types import AnalysisConfig
from xedeadlock.constants import NOT_AVAILABLE, REPORT_LEGEND
from xedeadlock.parsers.base import SourceReadError
from xedeadlock.parsers.xml_file import XmlTraceFileSource
from xedeadlock.providers import ConfigurationError, ExplicitPathProvider


@pytest.fixture
def service():
    return DeadlockAnalysisService(XmlTraceFileSource())


def run(service, pattern, start=None, end=None):
    return service.analyze(
        AnalysisConfig(trace_file_pattern=str(pattern), start_time=start, end_time=end)
    )


def as_tuples(report):
    return [
        (
            p.event_time,
            p.blocker_session,
            p.victim_session,
            p.query,
            p.locked_object,
            p.lock_mode,
            p.lock_type,
        )
        for p in report.pairs
    ]


class TestSystemHealthSample:
    """Analysis of the exported system_health fixture."""

    def test_pairs(self, service, system_health_fixture):
        report = run(service, system_health_fixture)

        rows = [
            (t, b, v, obj, mode, lt)
            for t, b, v, _query, obj, mode, lt in as_tuples(report)
        ]
        assert rows == [
            (datetime(2024, 3, 1, 9, 0), 65, 70, "N/A", "U", "U"),
            (datetime(2024, 3, 1, 10, 15, 42, 123000), 61, 54, "Sales.dbo.Orders", "X", "X"),
            (datetime(2024, 3, 1, 10, 15, 42, 123000), 61, 54, "Sales.dbo.Customers", "X", "X"),
            (datetime(2024, 3, 2, 12, 0), 85, 80, "Sales.dbo.Ledger", "Sch-M", "OBJECT"),
            (datetime(2024, 3, 2, 12, 0), 90, 80, "Sales.dbo.Ledger", "Sch-M", "OBJECT"),
        ]

    def test_victim_query_reported(self, service, system_health_fixture):
        report = run(service, system_health_fixture)

        assert report.pairs[0].query == NOT_AVAILABLE
        assert report.pairs[1].query.startswith("BEGIN TRAN;")
        assert "Sales.dbo.Customers SET Tier = 2" in report.pairs[1].query
        assert report.pairs[3].query.startswith("ALTER TABLE Sales.dbo.Ledger")

    def test_statistics(self, service, system_health_fixture):
        report = run(service, system_health_fixture)

        assert report.events_read == 4
        assert report.events_skipped == 1
        assert report.sources == [str(system_health_fixture)]
        assert report.legend == REPORT_LEGEND

    def test_time_window(self, service, system_health_fixture):
        report = run(
            service,
            system_health_fixture,
            start=datetime(2024, 3, 1, 10, 15, 42, 123000),
            end=datetime(2024, 3, 1, 23, 59),
        )
        assert {p.victim_session for p in report.pairs} == {54}
        assert len(report.pairs) == 2
        assert report.start_time == datetime(2024, 3, 1, 10, 15, 42, 123000)

    def test_time_window_with_aware_bounds(self, service, system_health_fixture):
        plus_one = timezone(timedelta(hours=1))
        report = run(
            service,
            system_health_fixture,
            start=datetime(2024, 3, 1, 11, 15, 42, 123000, tzinfo=plus_one),
            end=datetime(2024, 3, 1, 23, 59, tzinfo=UTC),
        )

        assert {p.victim_session for p in report.pairs} == {54}
        assert len(report.pairs) == 2
        assert report.start_time == datetime(2024, 3, 1, 10, 15, 42, 123000)

    def test_window_outside_data(self, service, system_health_fixture):
        report = run(
            service,
            system_health_fixture,
            start=datetime(2025, 1, 1),
            end=datetime(2023, 1, 1),
        )
        assert report.pairs == []

    def test_ordering_invariant(self, service, system_health_fixture):
        keys = [
            (p.event_time, p.blocker_session)
            for p in run(service, system_health_fixture).pairs
        ]
        assert keys == sorted(keys)


class TestScenarios:
    """Behavior on synthetic rotated trace files."""

    def test_single_blocker_victim_pair(self, service, trace_dir, trace_writer, t0):
        deadlock = deadlock_xml(
            processes=[
                process_xml("P1", 51, "UPDATE dbo.T SET c = 2"),
                process_xml("P2", 52, "SELECT 1"),
            ],
            resources=[
                resource_xml("R1", objectname="dbo.T", mode="X", owners=["P1"], waiters=["P2"])
            ],
            victims=["P2"],
        )
        trace_writer(1, [event_xml(t0, deadlock)])

        report = run(service, trace_dir / "system_health*.xml")

        assert as_tuples(report) == [(t0, 51, 52, "SELECT 1", "dbo.T", "X", "X")]

    def test_event_without_victim_list(self, service, trace_dir, trace_writer, t0):
        no_victims = deadlock_xml(
            processes=[process_xml("P1", 51), process_xml("P2", 52)],
            resources=[resource_xml("R1", mode="X", owners=["P1"], waiters=["P2"])],
            victims=None,
        )
        trace_writer(
            1,
            [
                event_xml(t0, no_victims),
                simple_deadlock_event(t0 + timedelta(minutes=1)),
            ],
        )

        report = run(service, trace_dir / "system_health*.xml")

        assert len(report.pairs) == 1
        assert report.pairs[0].event_time == t0 + timedelta(minutes=1)
        assert report.events_skipped == 1

    def test_same_attributes_different_times(self, service, trace_dir, trace_writer, t0):
        later = t0 + timedelta(hours=1)
        trace_writer(1, [simple_deadlock_event(t0), simple_deadlock_event(later)])

        report = run(service, trace_dir / "system_health*.xml")

        assert [p.event_time for p in report.pairs] == [t0, later]

    def test_duplicate_event_collapses(self, service, trace_dir, trace_writer, t0):
        """The same report appearing in two rotated files is reported once."""
        trace_writer(1, [simple_deadlock_event(t0)])
        trace_writer(2, [simple_deadlock_event(t0)])

        report = run(service, trace_dir / "system_health*.xml")

        assert report.events_read == 2
        assert len(report.pairs) == 1

    def test_victim_without_matching_resource(self, service, trace_dir, trace_writer, t0):
        deadlock = deadlock_xml(
            processes=[process_xml("P1", 51), process_xml("P2", 52, "SELECT 1")],
            resources=[
                resource_xml("R1", mode="X", owners=["P1"]),
                resource_xml("R2", mode="S", waiters=["P2"]),
            ],
            victims=["P2"],
        )
        trace_writer(1, [event_xml(t0, deadlock)])

        report = run(service, trace_dir / "system_health*.xml")

        assert report.pairs == []
        assert report.events_skipped == 0

    def test_null_coalescing(self, service, trace_dir, trace_writer, t0):
        trace_writer(
            1,
            [simple_deadlock_event(t0, query=None, objectname=None, mode="S")],
        )

        (pair,) = run(service, trace_dir / "system_health*.xml").pairs

        assert pair.query == NOT_AVAILABLE
        assert pair.locked_object == NOT_AVAILABLE
        assert pair.lock_mode == "S"
        assert pair.lock_type == "S"

    def test_explicit_lock_type_kept(self, service, trace_dir, trace_writer, t0):
        trace_writer(1, [simple_deadlock_event(t0, mode="X", locktype="KEY")])

        (pair,) = run(service, trace_dir / "system_health*.xml").pairs

        assert (pair.lock_mode, pair.lock_type) == ("X", "KEY")

    def test_rotated_files_sorted_chronologically(
        self, service, trace_dir, trace_writer, t0
    ):
        trace_writer(1, [simple_deadlock_event(t0 + timedelta(days=1), blocker_spid=60)])
        trace_writer(2, [simple_deadlock_event(t0, blocker_spid=70)])

        report = run(service, trace_dir / "system_health*.xml")

        assert [p.blocker_session for p in report.pairs] == [70, 60]

    def test_gzip_and_plain_files_mixed(self, service, trace_dir, trace_writer, t0):
        trace_writer(1, [simple_deadlock_event(t0)], compress=True)
        trace_writer(2, [simple_deadlock_event(t0 + timedelta(hours=1))], declaration=False)

        report = run(service, trace_dir / "system_health*.xml")

        assert len(report.pairs) == 2


class TestFailures:
    """Source failures abort the run."""

    def test_missing_files(self, service, trace_dir):
        with pytest.raises(SourceReadError):
            run(service, trace_dir / "system_health*.xml")

    def test_corrupt_file_aborts_without_partial_result(
        self, service, trace_dir, trace_writer, t0
    ):
        trace_writer(1, [simple_deadlock_event(t0)])
        (trace_dir / "system_health_0_000000000000000002.xml").write_text(
            '<?xml version="1.0"?><events><event name="xml_deadlock_report">'
        )

        with pytest.raises(SourceReadError):
            run(service, trace_dir / "system_health*.xml")

    def test_pattern_from_provider(self, trace_dir, trace_writer, t0):
        trace_writer(1, [simple_deadlock_event(t0)])
        service = DeadlockAnalysisService(
            XmlTraceFileSource(),
            ExplicitPathProvider(str(trace_dir / "system_health*.xml")),
        )

        report = service.analyze(AnalysisConfig())

        assert len(report.pairs) == 1

    def test_no_pattern(self, service):
        with pytest.raises(ConfigurationError):
            service.analyze(AnalysisConfig())
