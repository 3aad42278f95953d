"""Data models for deadlock analysis."""

from xedeadlock.models.events import DeadlockEvent
from xedeadlock.models.records import DeadlockGraph, ProcessRecord, ResourceRecord
from xedeadlock.models.report import CorrelatedPair, DeadlockReport

__all__ = [
    "CorrelatedPair",
    "DeadlockEvent",
    "DeadlockGraph",
    "DeadlockReport",
    "ProcessRecord",
    "ResourceRecord",
]
