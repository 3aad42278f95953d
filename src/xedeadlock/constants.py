"""
Constants for SQL Server extended-event deadlock analysis.

Based on the system_health session layout and the xml_deadlock_report
event schema.
"""

from enum import Enum
from pathlib import Path

# ============================================================================
# Extended Events
# ============================================================================

DEADLOCK_EVENT_NAME = "xml_deadlock_report"

# Fixed filename glob of the system_health session's file target
SYSTEM_HEALTH_FILE_GLOB = "system_health*.xel"

# Gzip magic bytes, used to detect compressed XML exports
GZIP_MAGIC = b"\x1f\x8b"

# Bytes read per chunk when streaming trace files
READ_CHUNK_SIZE = 64 * 1024


# ============================================================================
# Deadlock Graph Paths (ElementPath, relative to a <deadlock> node)
# ============================================================================

VICTIM_LIST_PATH = "victim-list"
VICTIM_PROCESS_PATH = "victim-list/victimProcess"
PROCESS_PATH = "process-list/process"
RESOURCE_LIST_PATH = "resource-list"
OWNER_PATH = "owner-list/owner"
WAITER_PATH = "waiter-list/waiter"


class ProcessRole(str, Enum):
    """Role of a session within a deadlock."""

    VICTIM = "Victim"
    BLOCKER = "Blocker"


# ============================================================================
# Output
# ============================================================================

NOT_AVAILABLE = "N/A"

REPORT_COLUMNS = (
    "EventTime",
    "BlockerSession",
    "VictimSession",
    "Query",
    "LockedObject",
    "LockMode",
    "LockType",
)

REPORT_LEGEND = (
    "In this result set, each group of rows represents a separate deadlock "
    "event. Here is how to interpret the columns:",
    "1. EventTime: The time when the deadlock occurred.",
    "2. BlockerSession: The session ID of the process that is blocking other "
    "processes.",
    "3. VictimSession: The session ID of the process that was chosen as the "
    "victim and terminated by SQL Server to resolve the deadlock.",
    "4. Query: The SQL query or procedure that was running in the session "
    "involved in the deadlock.",
    "5. LockedObject: The database object (e.g., table or index) that is "
    "involved in the deadlock.",
    "6. LockMode: The type of lock held by the process, such as S (Shared), "
    "X (Exclusive), or U (Update).",
    "7. LockType: The type of lock being requested or held, which might be the "
    "same as LockMode in some cases.",
    'Each block of rows indicates a deadlock event. The "BlockerSession" '
    "indicates the session that is holding a lock that prevents the "
    '"VictimSession" from proceeding. SQL Server resolves the deadlock by '
    'terminating the "VictimSession" and allowing the "BlockerSession" to '
    "continue.",
)

# Query column is truncated to this many characters in table output
TABLE_QUERY_WIDTH = 60

EVENT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


# ============================================================================
# Application Paths
# ============================================================================

DEFAULT_APP_DIR = Path.home() / ".xedeadlock"
DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_LOG_DIR = DEFAULT_APP_DIR / "logs"
DEFAULT_LOG_FILE = "xedeadlock.log"
DEFAULT_LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_LOG_BACKUP_COUNT = 5
