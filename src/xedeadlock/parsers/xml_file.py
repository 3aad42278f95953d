"""
XML Trace File Source

Reads extended events stored as XML, either a complete exported document
(<events><event .../>...</events>) or a bare sequence of <event> fragments
as produced by dumping the event_data column of the file target. Files may
be gzip-compressed.

Parsing is incremental: each <event> is detached from the document as soon
as it is complete, so memory use is bounded by the largest single event
rather than by the file size.
"""

import logging
import xml.etree.ElementTree as ET

from collections.abc import Iterator
from typing import BinaryIO

from xedeadlock.constants import READ_CHUNK_SIZE
from xedeadlock.models.events import DeadlockEvent
from xedeadlock.parsers.base import SourceReadError, TraceSource
from xedeadlock.parsers.compression import open_trace_file
from xedeadlock.parsers.discovery import TraceFileFinder
from xedeadlock.parsers.types import SourceMetadata, TraceFile

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"
WRAPPER_OPEN = b"<events>"
WRAPPER_CLOSE = b"</events>"


class XmlTraceFileSource(TraceSource):
    """Trace source for XML (optionally gzip-compressed) event files."""

    def __init__(
        self,
        finder: TraceFileFinder | None = None,
        chunk_size: int = READ_CHUNK_SIZE,
    ) -> None:
        super().__init__()
        self.finder = finder or TraceFileFinder()
        self.chunk_size = chunk_size

    def get_metadata(self) -> SourceMetadata:
        return SourceMetadata(
            source_id="xml_file",
            source_version="1.0.0",
            supported_formats=["XML", "XML+gzip"],
            description="Extended events exported as XML files",
        )

    def read_events(self, pattern: str) -> Iterator[DeadlockEvent]:
        for trace_file in self.finder.find_trace_files(pattern):
            yield from self.read_file(trace_file)

    def read_file(self, trace_file: TraceFile) -> Iterator[DeadlockEvent]:
        """
        Read deadlock reports from a single trace file.

        Args:
            trace_file: File found by TraceFileFinder

        Yields:
            DeadlockEvent objects in file order

        Raises:
            SourceReadError: If the file cannot be read or is not valid XML
        """
        source = str(trace_file.path)
        logger.debug(f"Reading trace file {source} ({trace_file.size_bytes} bytes)")

        try:
            stream = open_trace_file(trace_file.path, trace_file.compression)
        except FileNotFoundError:
            logger.debug(f"Trace file rotated away before reading: {source}")
            return
        except OSError as e:
            raise SourceReadError(
                f"Cannot open trace file {source}: {e}", source=source
            ) from e

        count = 0
        try:
            with stream:
                for event in self._iter_events(stream, source):
                    count += 1
                    yield event
        except ET.ParseError as e:
            raise SourceReadError(
                f"Corrupt trace file {source}: {e}", source=source
            ) from e
        except (OSError, EOFError) as e:
            raise SourceReadError(
                f"Cannot read trace file {source}: {e}", source=source
            ) from e

        logger.debug(f"Read {count} deadlock report(s) from {source}")

    def _iter_events(self, stream: BinaryIO, source: str) -> Iterator[DeadlockEvent]:
        parser = ET.XMLPullParser(events=("start", "end"))

        first = stream.read(self.chunk_size).removeprefix(UTF8_BOM)
        # Bare <event> fragments have no single root element
        wrapped = not first.lstrip().startswith(b"<?xml")
        if wrapped:
            parser.feed(WRAPPER_OPEN)

        stack: list[ET.Element] = []
        event_depth = 0
        chunk = first

        while True:
            if chunk:
                parser.feed(chunk)
            else:
                if wrapped:
                    parser.feed(WRAPPER_CLOSE)
                parser.close()

            for kind, element in parser.read_events():
                if kind == "start":
                    stack.append(element)
                    if element.tag == "event":
                        event_depth += 1
                    continue

                stack.pop()
                if element.tag != "event":
                    continue
                event_depth -= 1
                if event_depth:
                    continue

                if stack:
                    stack[-1].remove(element)
                event = self.to_deadlock_event(element, source)
                if event is not None:
                    yield event

            if not chunk:
                break
            chunk = stream.read(self.chunk_size)
