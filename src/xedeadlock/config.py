"""Configuration management for xedeadlock."""

import logging
import os
import tomllib

from pathlib import Path
from typing import Any, Literal

import tomli_w

from pydantic import BaseModel, Field, ValidationError, field_validator

from xedeadlock.constants import (
    DEFAULT_APP_DIR,
    DEFAULT_CONFIG_FILE,
    DEFAULT_LOG_BACKUP_COUNT,
    DEFAULT_LOG_DIR,
    DEFAULT_LOG_FILE,
    DEFAULT_LOG_MAX_BYTES,
)

logger = logging.getLogger(__name__)


def get_config_path() -> Path:
    """
    Get the path to the configuration file.

    Honors XEDEADLOCK_CONFIG when set.

    Returns:
        Path to ~/.xedeadlock/config.toml
    """
    override = os.environ.get("XEDEADLOCK_CONFIG")
    if override:
        return Path(override).expanduser()
    return DEFAULT_APP_DIR / DEFAULT_CONFIG_FILE


def load_config() -> dict[str, Any]:
    """
    Load configuration from TOML file.

    Returns:
        Configuration dictionary. Returns empty dict if file doesn't exist
        or is corrupted.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return {}

    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.warning("Treating config as empty. Fix or delete the file to resolve.")
        return {}


def save_config(config: dict[str, Any]) -> None:
    """
    Save configuration to TOML file using atomic write.

    Creates the parent directory if it doesn't exist.
    Uses temp file + rename for atomic operation.

    Args:
        config: Configuration dictionary to save

    Raises:
        PermissionError: If directory cannot be created or file cannot be written
    """
    config_path = get_config_path()

    config_dir = config_path.parent
    try:
        os.makedirs(config_dir, exist_ok=True)
    except PermissionError as e:
        raise PermissionError(
            f"Cannot create config directory {config_dir}: {e}"
        ) from e

    temp_path = config_path.with_suffix(".toml.tmp")

    try:
        with open(temp_path, "wb") as f:
            tomli_w.dump(config, f)

        os.replace(temp_path, config_path)

    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


def get_trace_pattern() -> str | None:
    """
    Get the configured trace file pattern.

    Returns:
        Pattern from the [trace] table, or None if not set
    """
    config = load_config()
    pattern: str | None = config.get("trace", {}).get("file_pattern")
    return pattern


def set_trace_pattern(pattern: str) -> None:
    """
    Set the trace file pattern in config.

    Args:
        pattern: Glob of the trace files to read by default
    """
    config = load_config()

    if "trace" not in config:
        config["trace"] = {}

    config["trace"]["file_pattern"] = pattern
    save_config(config)


def unset_trace_pattern() -> None:
    """
    Remove the trace file pattern from config.

    If this was the only setting in the trace section, removes the section.
    If config becomes empty, deletes the config file.
    """
    config = load_config()

    if "trace" in config and "file_pattern" in config["trace"]:
        del config["trace"]["file_pattern"]

        if not config["trace"]:
            del config["trace"]

        if not config:
            config_path = get_config_path()
            if config_path.exists():
                config_path.unlink()
        else:
            save_config(config)


class LoggingSettings(BaseModel):
    """The [logging] table, which controls the rotating log file."""

    enabled: bool = Field(default=True, description="Write a log file")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="DEBUG", description="Minimum level written to the log file"
    )
    file: Path = Field(
        default=DEFAULT_LOG_DIR / DEFAULT_LOG_FILE, description="Log file path"
    )
    max_size_mb: int = Field(
        default=DEFAULT_LOG_MAX_BYTES // (1024 * 1024),
        ge=1,
        description="Size at which the log file is rotated",
    )
    backup_count: int = Field(
        default=DEFAULT_LOG_BACKUP_COUNT, ge=0, description="Rotated files kept"
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("file", mode="after")
    @classmethod
    def expand_file(cls, v: Path) -> Path:
        return v.expanduser()


def get_logging_settings() -> LoggingSettings:
    """
    Get the configured logging settings.

    Returns:
        Settings from the [logging] table. Defaults are used when the table
        is missing or invalid.
    """
    table = load_config().get("logging", {})
    if not isinstance(table, dict):
        logger.warning("Ignoring [logging] config: expected a table")
        return LoggingSettings()

    try:
        return LoggingSettings.model_validate(table)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid [logging] config: {e}")
        return LoggingSettings()
