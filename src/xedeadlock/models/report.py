"""Report output models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from xedeadlock.constants import REPORT_COLUMNS, REPORT_LEGEND


class CorrelatedPair(BaseModel):
    """
    One blocker/victim relationship over a shared resource.

    Equality and hashing cover every field, so a set of pairs is
    deduplicated on the full output tuple.
    """

    model_config = ConfigDict(frozen=True)

    event_time: datetime = Field(description="When the deadlock occurred")
    blocker_session: int | None = Field(description="Blocking session id")
    victim_session: int | None = Field(description="Victim session id")
    query: str = Field(description="Victim's input buffer")
    locked_object: str = Field(description="Object the victim was blocked on")
    lock_mode: str = Field(description="Lock mode")
    lock_type: str | None = Field(description="Lock type")

    def as_row(self) -> dict[str, Any]:
        """Return the pair keyed by report column name."""
        values = (
            self.event_time,
            self.blocker_session,
            self.victim_session,
            self.query,
            self.locked_object,
            self.lock_mode,
            self.lock_type,
        )
        return dict(zip(REPORT_COLUMNS, values, strict=True))


class DeadlockReport(BaseModel):
    """Complete result of one analysis run."""

    pairs: list[CorrelatedPair] = Field(default_factory=list)
    legend: tuple[str, ...] = Field(default=REPORT_LEGEND)
    sources: list[str] = Field(
        default_factory=list, description="Trace patterns that were read"
    )
    events_read: int = Field(default=0, ge=0, description="Deadlock events read")
    events_skipped: int = Field(
        default=0, ge=0, description="Events dropped as malformed"
    )
    start_time: datetime | None = Field(default=None)
    end_time: datetime | None = Field(default=None)

    @property
    def is_empty(self) -> bool:
        return not self.pairs
