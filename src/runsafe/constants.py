"""Constants for runsafe."""

# Log rotation defaults
DEFAULT_MAX_BYTES = 1024 * 1024  # 1 MiB
DEFAULT_BACKUP_COUNT = 5
LOG_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Lock acquisition
LOCK_SUFFIX = ".lock"
LOG_SUFFIX = ".log"
MAX_LOCK_RETRIES = 3  # Max retries when clearing stale locks
LOCK_RETRY_DELAY = 0.1  # Seconds between retries on an unreadable marker
LOCK_WRITE_GRACE = 2.0  # Unreadable markers younger than this may still be in progress

# Signals forwarded to the wrapped command before it is killed outright
SIGNALS_BEFORE_KILL = 2

# Exit codes
EXIT_OK = 0
EXIT_ALREADY_RUNNING = 1
EXIT_TASK_FAILED = 1  # Default when a failure carries no status code
EXIT_CONFIG_ERROR = 2
EXIT_NOT_EXECUTABLE = 126
EXIT_MISSING_DEPENDENCY = 127
EXIT_SIGNAL_BASE = 128

# Environment overrides
ENV_PREFIX = "RUNSAFE_"
