"""Analysis type definitions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from xedeadlock.models.events import to_naive_utc


class AnalysisConfig(BaseModel):
    """
    Parameters of one analysis run.

    Both time bounds are optional, independent and inclusive; a window with
    start_time after end_time is accepted and matches nothing. Aware bounds
    are converted to naive UTC so they compare with event times. A missing
    trace file pattern is resolved by a TracePathProvider before the run.
    """

    model_config = ConfigDict(frozen=True)

    start_time: datetime | None = Field(
        default=None, description="Inclusive lower bound on event time (UTC)"
    )
    end_time: datetime | None = Field(
        default=None, description="Inclusive upper bound on event time (UTC)"
    )
    trace_file_pattern: str | None = Field(
        default=None, description="Glob of the trace files to read"
    )

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_bound(cls, v: datetime | None) -> datetime | None:
        """Store bounds as naive UTC."""
        return to_naive_utc(v) if v is not None else None
