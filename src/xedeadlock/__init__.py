"""
xedeadlock: SQL Server deadlock report analysis

Reads xml_deadlock_report events from extended-event trace files and
correlates them into blocker/victim session pairs.
"""

from xedeadlock.analysis.service import DeadlockAnalysisService
from xedeadlock.analysis.types import AnalysisConfig
from xedeadlock.models.report import CorrelatedPair, DeadlockReport

__all__ = [
    "AnalysisConfig",
    "CorrelatedPair",
    "DeadlockAnalysisService",
    "DeadlockReport",
]
