"""
Abstract Trace Source Interface

This module defines the base class that every trace source implements.
A trace source turns a file pattern into a lazy stream of deadlock events;
everything downstream (extraction, correlation, output) only sees
DeadlockEvent objects and never touches files or connections.
"""

import logging

from abc import ABC, abstractmethod
from collections.abc import Iterator
from datetime import datetime
from xml.etree.ElementTree import Element

from xedeadlock.constants import DEADLOCK_EVENT_NAME
from xedeadlock.models.events import DeadlockEvent, to_naive_utc
from xedeadlock.parsers.types import SourceMetadata

logger = logging.getLogger(__name__)


class TraceSource(ABC):
    """
    Abstract base class for extended-event trace sources.

    Subclasses implement read_events() and get_metadata(); filtering to
    deadlock reports and timestamp handling are shared here.

    Usage Example:
        class MyTraceSource(TraceSource):
            def get_metadata(self):
                return SourceMetadata(source_id="mine", ...)

            def read_events(self, pattern):
                for element in self._parse(pattern):
                    event = self.to_deadlock_event(element, pattern)
                    if event is not None:
                        yield event
    """

    def __init__(self) -> None:
        self._metadata = self.get_metadata()

    @abstractmethod
    def get_metadata(self) -> SourceMetadata:
        """
        Return metadata about this source.

        Returns:
            SourceMetadata with source information
        """
        pass

    @abstractmethod
    def read_events(self, pattern: str) -> Iterator[DeadlockEvent]:
        """
        Read deadlock report events from every trace file matching a pattern.

        Events are yielded in physical order (file by file, then position
        within each file); no chronological ordering is implied.

        Args:
            pattern: Filesystem glob of one or more rotated trace files

        Yields:
            DeadlockEvent for each xml_deadlock_report record

        Raises:
            SourceReadError: If no file matches or a file cannot be read
        """
        pass

    @staticmethod
    def is_deadlock_report(element: Element) -> bool:
        """Check whether an <event> element is a deadlock report."""
        return element.get("name") == DEADLOCK_EVENT_NAME

    @staticmethod
    def parse_timestamp(value: str | None) -> datetime | None:
        """
        Parse an event @timestamp attribute.

        Timezone-aware values are converted to UTC and made naive, matching
        how the engine casts the attribute to DATETIME2.

        Returns:
            Naive UTC datetime, or None if missing or unparseable
        """
        if not value:
            return None
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
        return to_naive_utc(parsed)

    def to_deadlock_event(self, element: Element, source: str) -> DeadlockEvent | None:
        """
        Build a DeadlockEvent from an <event> element.

        Returns None for events of other types and for deadlock reports
        whose timestamp cannot be read; the latter are logged and skipped.
        """
        if not self.is_deadlock_report(element):
            return None

        timestamp = self.parse_timestamp(element.get("timestamp"))
        if timestamp is None:
            logger.warning(
                f"Skipping deadlock report with invalid timestamp "
                f"{element.get('timestamp')!r} in {source}"
            )
            return None

        return DeadlockEvent(
            name=element.get("name", DEADLOCK_EVENT_NAME),
            timestamp=timestamp,
            payload=element,
            source=source,
        )

    @property
    def metadata(self) -> SourceMetadata:
        """Get source metadata."""
        return self._metadata

    @property
    def source_id(self) -> str:
        """Get unique source identifier."""
        return self._metadata.source_id

    def __str__(self) -> str:
        return f"{self.source_id} (v{self._metadata.source_version}): {self._metadata.description}"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.source_id}>"


class SourceReadError(Exception):
    """Raised when trace files are missing, unreadable or corrupt."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source
