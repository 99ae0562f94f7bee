"""
Shared utilities for the debrep CLI.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Optional

# =============================================================================
# Constants
# =============================================================================

# Layout of a debrep working directory, relative to its root
CONFIG_FILE = "sources.toml"
BUILD_DIR = Path("build")
LOGS_DIR = Path("logs")
RECORD_DIR = Path("record")
DEBIAN_DIR = Path("debian")
ASSETS_CACHE = Path("assets") / "cache"
ASSETS_PACKAGES = Path("assets") / "packages"
SHARED_ASSETS = Path("assets") / "share"
POOL_DIR = Path("repo") / "pool"

# Component every built package is published into
POOL_COMPONENT = "main"


# =============================================================================
# Logging
# =============================================================================


class Logger:
    """Simple colored logger with --no-color support."""

    COLORS = {
        "reset": "\033[0m",
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "blue": "\033[94m",
        "magenta": "\033[95m",
        "cyan": "\033[96m",
        "bold": "\033[1m",
        "dim": "\033[2m",
    }

    def __init__(self, use_color: Optional[bool] = None, verbose: bool = False):
        if use_color is None:
            self._use_color = sys.stdout.isatty()
        else:
            self._use_color = use_color
        self._verbose = verbose

    def set_color(self, use_color: bool) -> None:
        """Set whether to use color output."""
        self._use_color = use_color

    def set_verbose(self, verbose: bool) -> None:
        """Set whether debug messages are printed."""
        self._verbose = verbose

    @property
    def verbose(self) -> bool:
        return self._verbose

    def _color(self, text: str, color: str) -> str:
        if not self._use_color:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def header(self, message: str) -> None:
        """Print a section header."""
        print(f"\n{self._color('===', 'cyan')} {self._color(message, 'bold')} {self._color('===', 'cyan')}")

    def info(self, message: str) -> None:
        """Print an info message."""
        print(f"  {message}")

    def success(self, message: str) -> None:
        """Print a success message."""
        print(f"  {self._color('[OK]', 'green')} {message}")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        print(f"  {self._color('[WARN]', 'yellow')} {message}")

    def error(self, message: str) -> None:
        """Print an error message."""
        print(f"  {self._color('[ERROR]', 'red')} {message}", file=sys.stderr)

    def dim(self, message: str) -> None:
        """Print a dim/secondary message."""
        print(f"  {self._color(message, 'dim')}")

    def debug(self, message: str) -> None:
        """Print a debug message when verbose output is enabled."""
        if self._verbose:
            print(f"  {self._color('[DEBUG]', 'magenta')} {self._color(message, 'dim')}")


# Global logger instance
log = Logger()


# =============================================================================
# Runtime Utilities
# =============================================================================


def run_cmd(
    cmd: list[str],
    cwd: Optional[Path] = None,
    capture: bool = False,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run a command with proper error handling."""
    log.debug(f"executing {' '.join(cmd)}" + (f" in {cwd}" if cwd else ""))
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=capture,
            text=True,
            check=check,
        )
        return result
    except subprocess.CalledProcessError as e:
        if capture:
            log.error(f"Command failed: {' '.join(cmd)}")
            if e.stdout:
                log.error(f"stdout: {e.stdout}")
            if e.stderr:
                log.error(f"stderr: {e.stderr}")
        raise


def pool_prefix(name: str) -> str:
    """Debian pool prefix for a package name (``libfoo`` -> ``libf``)."""
    if name.startswith("lib") and len(name) > 3:
        return name[:4]
    return name[:1]
