"""Trace source type definitions."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class SourceMetadata(BaseModel):
    """Metadata about a trace source implementation."""

    source_id: str = Field(description="Unique source identifier")
    source_version: str = Field(description="Source version")
    supported_formats: list[str] = Field(description="Supported trace formats")
    description: str = Field(description="Source description")
    requires_libraries: list[str] | None = Field(
        None, description="External library dependencies"
    )


class TraceFile(BaseModel):
    """A trace file matched by a file pattern."""

    path: Path = Field(description="File path")
    compression: Literal["none", "gzip"] = Field(
        default="none", description="Detected compression"
    )
    size_bytes: int = Field(ge=0, description="File size when discovered")
