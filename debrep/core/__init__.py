"""
debrep.core - Foundation layer for the debrep CLI.

Exports the logger, path constants, the command runner and the error taxonomy.
"""

from debrep.core.utils import (
    # Logging
    log,
    Logger,
    # Constants
    CONFIG_FILE,
    BUILD_DIR,
    LOGS_DIR,
    RECORD_DIR,
    DEBIAN_DIR,
    ASSETS_CACHE,
    ASSETS_PACKAGES,
    SHARED_ASSETS,
    POOL_DIR,
    POOL_COMPONENT,
    # Runtime utilities
    run_cmd,
    pool_prefix,
)
from debrep.core.timing import StageTimer, format_duration
from debrep.core.errors import BuildError, ConfigError

__all__ = [
    # Logging
    "log",
    "Logger",
    # Constants
    "CONFIG_FILE",
    "BUILD_DIR",
    "LOGS_DIR",
    "RECORD_DIR",
    "DEBIAN_DIR",
    "ASSETS_CACHE",
    "ASSETS_PACKAGES",
    "SHARED_ASSETS",
    "POOL_DIR",
    "POOL_COMPONENT",
    # Runtime utilities
    "run_cmd",
    "pool_prefix",
    # Timing
    "StageTimer",
    "format_duration",
    # Errors
    "BuildError",
    "ConfigError",
]
