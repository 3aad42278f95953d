"""
Trace file pattern providers.

The analysis pipeline only ever receives an already-resolved pattern. Where
that pattern comes from (command line, config file, or the server's own
error-log location) is decided here.
"""

import logging

from typing import Protocol

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from xedeadlock.config import get_trace_pattern
from xedeadlock.constants import SYSTEM_HEALTH_FILE_GLOB

logger = logging.getLogger(__name__)

ERROR_LOG_QUERY = text(
    "SELECT CONVERT(NVARCHAR(4000), SERVERPROPERTY('ErrorLogFileName'))"
)


class ConfigurationError(Exception):
    """Raised when no trace file pattern can be resolved."""

    pass


class TracePathProvider(Protocol):
    """Anything that can supply a trace file pattern."""

    def get_pattern(self) -> str | None:
        """Return a trace file pattern, or None if this provider has none."""
        ...


def derive_trace_pattern(error_log_path: str) -> str:
    """
    Derive the system_health file pattern from the error log file path.

    The session's files live next to the error log, so the pattern is the
    log's directory (up to and including the last separator) plus the fixed
    system_health glob. Both Windows and Linux separators are recognized.

    Args:
        error_log_path: Value of SERVERPROPERTY('ErrorLogFileName')

    Returns:
        Glob such as C:\\...\\MSSQL\\Log\\system_health*.xel

    Raises:
        ConfigurationError: If the path is empty
    """
    error_log_path = error_log_path.strip()
    if not error_log_path:
        raise ConfigurationError("Server reported an empty error log path")

    cut = max(error_log_path.rfind("\\"), error_log_path.rfind("/"))
    return error_log_path[: cut + 1] + SYSTEM_HEALTH_FILE_GLOB


class ExplicitPathProvider:
    """Provider for a pattern given directly by the caller."""

    def __init__(self, pattern: str | None) -> None:
        self.pattern = pattern

    def get_pattern(self) -> str | None:
        return self.pattern or None


class ConfigPathProvider:
    """Provider reading [trace] file_pattern from the config file."""

    def get_pattern(self) -> str | None:
        return get_trace_pattern() or None


class ServerLogPathProvider:
    """Provider deriving the pattern from the server's error log location."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def get_pattern(self) -> str | None:
        try:
            with self.engine.connect() as conn:
                error_log_path = conn.execute(ERROR_LOG_QUERY).scalar()
        except SQLAlchemyError as e:
            raise ConfigurationError(
                f"Could not query the server's error log location: {e}"
            ) from e

        if error_log_path is None:
            logger.warning("Server did not report an error log file name")
            return None

        pattern = derive_trace_pattern(str(error_log_path))
        logger.debug(f"Derived trace pattern {pattern} from {error_log_path}")
        return pattern


class ChainedPathProvider:
    """Try providers in order and use the first pattern found."""

    def __init__(self, *providers: TracePathProvider) -> None:
        self.providers = providers

    def get_pattern(self) -> str | None:
        for provider in self.providers:
            pattern = provider.get_pattern()
            if pattern:
                logger.debug(f"Trace pattern from {type(provider).__name__}: {pattern}")
                return pattern
        return None


def resolve_pattern(provider: TracePathProvider) -> str:
    """
    Resolve a pattern or fail.

    Raises:
        ConfigurationError: If the provider yields no pattern
    """
    pattern = provider.get_pattern()
    if not pattern:
        raise ConfigurationError(
            "No trace file pattern. Pass one explicitly, set it with "
            "'xedeadlock config set-trace-pattern', or use --server to derive it."
        )
    return pattern
