"""Trace sources for extended-event deadlock reports."""

from xedeadlock.parsers.base import SourceReadError, TraceSource
from xedeadlock.parsers.discovery import TraceFileFinder
from xedeadlock.parsers.xml_file import XmlTraceFileSource

__all__ = [
    "SourceReadError",
    "TraceFileFinder",
    "TraceSource",
    "XmlTraceFileSource",
]
