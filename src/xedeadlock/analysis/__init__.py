"""Deadlock extraction and correlation."""

from xedeadlock.analysis.correlator import correlate
from xedeadlock.analysis.extractor import MalformedEventError, extract_event
from xedeadlock.analysis.service import DeadlockAnalysisService
from xedeadlock.analysis.types import AnalysisConfig

__all__ = [
    "AnalysisConfig",
    "DeadlockAnalysisService",
    "MalformedEventError",
    "correlate",
    "extract_event",
]
