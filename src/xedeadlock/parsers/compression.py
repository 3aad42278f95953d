"""Compression utilities for exported trace files."""

import gzip

from pathlib import Path
from typing import BinaryIO, Literal

from xedeadlock.constants import GZIP_MAGIC

Compression = Literal["none", "gzip"]


def detect_compression(path: Path) -> Compression:
    """
    Detect whether a trace file is gzip-compressed.

    Detection uses the gzip magic bytes rather than the file extension, so
    renamed exports are still read correctly.

    Args:
        path: Trace file path

    Returns:
        "gzip" or "none"

    Raises:
        OSError: If the file cannot be opened
    """
    with open(path, "rb") as f:
        header = f.read(len(GZIP_MAGIC))
    return "gzip" if header == GZIP_MAGIC else "none"


def open_trace_file(path: Path, compression: Compression | None = None) -> BinaryIO:
    """
    Open a trace file for binary reading, decompressing transparently.

    Args:
        path: Trace file path
        compression: Known compression, or None to detect it

    Returns:
        Binary file object positioned at the start of the XML content

    Raises:
        OSError: If the file cannot be opened
    """
    if compression is None:
        compression = detect_compression(path)

    if compression == "gzip":
        return gzip.open(path, "rb")
    return open(path, "rb")
