"""
Analysis service for deadlock reports.

This module provides the main interface for running the read -> extract ->
correlate pipeline over a set of trace files and returning a complete
DeadlockReport.
"""

import logging
import time

from datetime import datetime

from xedeadlock.analysis.correlator import correlate
from xedeadlock.analysis.extractor import MalformedEventError, extract_event
from xedeadlock.analysis.types import AnalysisConfig
from xedeadlock.models.records import DeadlockGraph
from xedeadlock.models.report import DeadlockReport
from xedeadlock.parsers.base import TraceSource
from xedeadlock.providers import (
    ConfigurationError,
    TracePathProvider,
    resolve_pattern,
)

logger = logging.getLogger(__name__)

__all__ = ["DeadlockAnalysisService", "AnalysisConfig"]


class DeadlockAnalysisService:
    """
    Service for correlating deadlock reports into blocker/victim pairs.

    This service handles:
    - Resolving the trace file pattern
    - Reading deadlock events from the trace source
    - Extracting each event, skipping malformed ones
    - Correlating, filtering and ordering the resulting pairs

    Source read failures are not caught: a run either returns a complete
    report or raises.

    Example:
        >>> service = DeadlockAnalysisService(XmlTraceFileSource())
        >>> report = service.analyze(AnalysisConfig(trace_file_pattern="logs/*.xml"))
        >>> print(len(report.pairs))
    """

    def __init__(
        self,
        source: TraceSource,
        path_provider: TracePathProvider | None = None,
    ):
        """
        Initialize analysis service.

        Args:
            source: Trace source to read events from
            path_provider: Fallback used when the config carries no pattern
        """
        self.source = source
        self.path_provider = path_provider

    def _resolve_pattern(self, config: AnalysisConfig) -> str:
        if config.trace_file_pattern:
            return config.trace_file_pattern
        if self.path_provider is None:
            raise ConfigurationError("No trace file pattern given")
        return resolve_pattern(self.path_provider)

    def analyze(self, config: AnalysisConfig) -> DeadlockReport:
        """
        Run the analysis pipeline.

        Args:
            config: Time window and trace file pattern

        Returns:
            DeadlockReport with ordered, deduplicated pairs

        Raises:
            SourceReadError: If the trace files cannot be read
            ConfigurationError: If no trace file pattern can be resolved
        """
        pattern = self._resolve_pattern(config)
        logger.info(f"Analyzing deadlock reports from {pattern}")
        started = time.perf_counter()

        graphs: list[tuple[datetime, DeadlockGraph]] = []
        events_read = 0
        events_skipped = 0

        for event in self.source.read_events(pattern):
            events_read += 1
            try:
                event_graphs = extract_event(event)
            except MalformedEventError as e:
                events_skipped += 1
                logger.warning(f"Skipping malformed event from {event.source}: {e}")
                continue
            graphs.extend((event.timestamp, graph) for graph in event_graphs)

        pairs = correlate(graphs, config.start_time, config.end_time)

        elapsed = time.perf_counter() - started
        logger.info(
            f"Read {events_read} deadlock report(s), skipped {events_skipped}, "
            f"found {len(pairs)} blocker/victim pair(s) in {elapsed:.2f}s"
        )

        return DeadlockReport(
            pairs=pairs,
            sources=[pattern],
            events_read=events_read,
            events_skipped=events_skipped,
            start_time=config.start_time,
            end_time=config.end_time,
        )
