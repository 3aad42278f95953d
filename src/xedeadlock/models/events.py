"""Raw trace event model."""

from datetime import UTC, datetime
from xml.etree.ElementTree import Element

from pydantic import BaseModel, ConfigDict, Field


def to_naive_utc(moment: datetime) -> datetime:
    """
    Convert a datetime to naive UTC.

    Event times are compared as naive UTC values, the form the engine's
    DATETIME2 cast of @timestamp produces. Naive input is returned unchanged.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(UTC).replace(tzinfo=None)


class DeadlockEvent(BaseModel):
    """
    One xml_deadlock_report occurrence read from a trace source.

    The payload is the parsed <event> element. It is only ever read, never
    modified, and is discarded once the event has been extracted.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(description="Extended event name")
    timestamp: datetime = Field(description="Event time (naive UTC)")
    payload: Element = Field(description="Parsed <event> element", repr=False)
    source: str = Field(default="", description="File or pattern the event came from")
