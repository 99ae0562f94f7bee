"""
Version inspection for debrep workspaces.

Reads the changelog versions and the git state that build records are keyed on.
"""

from __future__ import annotations

from pathlib import Path

from debian.changelog import Changelog

from debrep.core.utils import run_cmd


def changelog_versions(path: Path, limit: int = 1) -> list[str]:
    """Return up to ``limit`` versions from a debian/changelog, newest first.

    Raises:
        OSError: If the changelog cannot be read.
    """
    with open(path, encoding="utf-8") as f:
        changelog = Changelog(f, max_blocks=limit)
    # An empty or heading-less changelog parses to one block without a version
    return [str(version) for version in changelog.versions if version is not None][:limit]


def git_state(directory: Path) -> tuple[str, str]:
    """Return the (branch, commit) checked out in ``directory``.

    Raises:
        subprocess.CalledProcessError: If ``directory`` is not a git checkout.
        OSError: If git cannot be executed.
    """
    branch = run_cmd(
        ["git", "rev-parse", "--abbrev-ref", "HEAD"],
        cwd=directory,
        capture=True,
    ).stdout.strip()
    commit = run_cmd(
        ["git", "rev-parse", "HEAD"],
        cwd=directory,
        capture=True,
    ).stdout.strip()
    return branch, commit
