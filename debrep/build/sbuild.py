"""
sbuild invocation for debrep.

Stdout of sbuild goes to our own stdout; stderr is written to the package's
log file, which is truncated on every run.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from debrep.build.config import Source
from debrep.core.errors import BuildFailedError, CommandError, OpenError
from debrep.core.utils import log

SBUILD = "sbuild"
SBUILD_FLAGS = ["-v", "--log-external-command-output", "--log-external-command-error"]


def sbuild_command(
    source: Source,
    branch: str,
    workspace: Path,
    extra_packages: list[Path],
) -> list[str]:
    """Assemble the sbuild command line for one package."""
    cmd = [SBUILD, *SBUILD_FLAGS, "-d", branch]
    cmd.extend(f"--extra-package={path}" for path in extra_packages)
    cmd.extend(f"--pre-build-commands={c}" for c in source.prebuild)
    cmd.extend(f"--starting-build-commands={c}" for c in source.starting_build)
    cmd.append(str(workspace))
    return cmd


def sbuild(
    source: Source,
    branch: str,
    workspace: Path,
    extra_packages: list[Path],
    log_path: Path,
    cwd: Path,
) -> None:
    """Build ``workspace`` with sbuild; output packages land in ``cwd``.

    Raises:
        OpenError: If the log file cannot be created.
        CommandError: If sbuild cannot be started.
        BuildFailedError: If sbuild exits non-zero.
    """
    cmd = sbuild_command(source, branch, workspace, extra_packages)

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_file = open(log_path, "w")
    except OSError as e:
        raise OpenError(log_path, e) from e

    log.debug(f"executing {cmd}")
    # sbuild writes straight to our stdout
    sys.stdout.flush()
    with log_file:
        try:
            result = subprocess.run(cmd, cwd=cwd, stderr=log_file, check=False)
        except OSError as e:
            raise CommandError(SBUILD, e) from e

    if result.returncode != 0:
        log.dim(f"sbuild errors for {source.name} are in {log_path}")
        raise BuildFailedError(source.name)
