"""
Server-side Trace Source

Binary .xel files can only be decoded by the engine itself, so this source
asks SQL Server to read them with sys.fn_xe_file_target_read_file and
parses the returned event_data XML.
"""

import logging
import xml.etree.ElementTree as ET

from collections.abc import Iterator

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from xedeadlock.constants import DEADLOCK_EVENT_NAME
from xedeadlock.models.events import DeadlockEvent
from xedeadlock.parsers.base import SourceReadError, TraceSource
from xedeadlock.parsers.types import SourceMetadata

logger = logging.getLogger(__name__)

READ_FILE_QUERY = text(
    """
    SELECT CAST(event_data AS NVARCHAR(MAX)) AS event_data
    FROM sys.fn_xe_file_target_read_file(:pattern, NULL, NULL, NULL)
    WHERE object_name = :event_name
    """
)


class ServerTraceSource(TraceSource):
    """Trace source that reads .xel files through a SQL Server connection."""

    def __init__(self, engine: Engine) -> None:
        super().__init__()
        self.engine = engine

    def get_metadata(self) -> SourceMetadata:
        return SourceMetadata(
            source_id="sql_server",
            source_version="1.0.0",
            supported_formats=["XEL"],
            description="Extended event files read by SQL Server",
            requires_libraries=["sqlalchemy", "pyodbc"],
        )

    def read_events(self, pattern: str) -> Iterator[DeadlockEvent]:
        logger.debug(f"Reading {pattern} through {self.engine.url.host or 'server'}")

        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    READ_FILE_QUERY,
                    {"pattern": pattern, "event_name": DEADLOCK_EVENT_NAME},
                )
                for (event_data,) in result:
                    event = self._parse_event_data(event_data, pattern)
                    if event is not None:
                        yield event
        except SQLAlchemyError as e:
            raise SourceReadError(
                f"Server could not read trace files {pattern}: {e}", source=pattern
            ) from e

    def _parse_event_data(self, event_data: str | None, pattern: str) -> DeadlockEvent | None:
        if not event_data:
            return None
        try:
            element = ET.fromstring(event_data)
        except ET.ParseError as e:
            raise SourceReadError(
                f"Server returned malformed event data for {pattern}: {e}",
                source=pattern,
            ) from e
        return self.to_deadlock_event(element, pattern)
