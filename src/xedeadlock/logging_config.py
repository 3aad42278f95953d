"""Logging setup for the xedeadlock CLI."""

import logging
import logging.config
import sys

from typing import Any

from xedeadlock.config import LoggingSettings, get_logging_settings

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_logging_configured = False


def build_logging_config(
    settings: LoggingSettings,
    verbose: bool = False,
    console_format: str | None = None,
) -> dict[str, Any]:
    """
    Build the dictConfig configuration dictionary.

    The console handler writes to stderr so report output on stdout stays
    clean. The rotating file handler is added only when settings.enabled.

    Args:
        settings: The [logging] table of the config file
        verbose: If True, set console to DEBUG level
        console_format: Override console format string

    Returns:
        Dictionary suitable for logging.config.dictConfig()
    """
    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": console_format or FILE_FORMAT},
            "file": {"format": FILE_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG" if verbose else "INFO",
                "formatter": "console",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {"level": "DEBUG", "handlers": ["console"]},
    }

    if settings.enabled:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.level,
            "formatter": "file",
            "filename": str(settings.file),
            "maxBytes": settings.max_size_mb * 1024 * 1024,
            "backupCount": settings.backup_count,
            "encoding": "utf-8",
        }
        config["root"]["handlers"].append("file")

    return config


def setup_logging(*, verbose: bool = False, console_format: str | None = None) -> None:
    """
    Configure logging once per process.

    Falls back to console-only logging when the log file cannot be created.
    """
    global _logging_configured

    if _logging_configured:
        return

    settings = get_logging_settings()
    if settings.enabled:
        try:
            settings.file.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            sys.stderr.write(f"WARNING: Cannot create log directory: {e}\n")
            settings = settings.model_copy(update={"enabled": False})

    try:
        logging.config.dictConfig(
            build_logging_config(settings, verbose=verbose, console_format=console_format)
        )
    except (ValueError, OSError) as e:
        sys.stderr.write(f"WARNING: Failed to configure logging: {e}\n")
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format=console_format or "%(levelname)s: %(message)s",
        )

    _logging_configured = True
