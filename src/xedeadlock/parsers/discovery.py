"""Trace file discovery for rotated extended-event targets."""

import glob
import logging

from pathlib import Path

from xedeadlock.parsers.base import SourceReadError
from xedeadlock.parsers.compression import detect_compression
from xedeadlock.parsers.types import TraceFile

__all__ = ["TraceFileFinder", "TraceFile"]

logger = logging.getLogger(__name__)


class TraceFileFinder:
    """Resolve a trace file pattern to the files it currently matches."""

    def find_trace_files(self, pattern: str) -> list[TraceFile]:
        """
        Find all trace files matching a glob pattern.

        The session's file target rolls over into files whose names carry an
        increasing rollover number, so sorting by name gives rollover order.
        Files that disappear between globbing and inspection (rotated away by
        the tracing facility) are skipped.

        Args:
            pattern: Filesystem glob, "~" is expanded

        Returns:
            List of TraceFile objects sorted by path

        Raises:
            SourceReadError: If the pattern matches no files
        """
        expanded = str(Path(pattern).expanduser())
        matches = sorted(Path(p) for p in glob.glob(expanded))

        files = []
        for path in matches:
            if not path.is_file():
                continue
            try:
                files.append(
                    TraceFile(
                        path=path,
                        compression=detect_compression(path),
                        size_bytes=path.stat().st_size,
                    )
                )
            except FileNotFoundError:
                logger.debug(f"Trace file rotated away before reading: {path}")
            except OSError as e:
                raise SourceReadError(
                    f"Cannot access trace file {path}: {e}", source=str(path)
                ) from e

        if not files:
            raise SourceReadError(
                f"No trace files match pattern: {pattern}", source=pattern
            )

        logger.debug(f"Pattern {pattern} matched {len(files)} trace file(s)")
        return files
