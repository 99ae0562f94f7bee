"""
Pre-flight checks for debrep builds.

Decides whether a package has to be rebuilt, runs sbuild when it does, and
records what was built afterwards. The decision depends on the ``build_on``
strategy of the source:

    (unset)     always build, no record kept
    changelog   skip if the newest changelog version was already built
    commit      skip if this (branch, commit) pair was already built

``force`` always builds, but still updates the record. The record is only
updated once the optional ``publish`` step has succeeded, so a package whose
output never reached the pool is built again next time.
"""

from __future__ import annotations

import subprocess
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from debian.changelog import ChangelogParseError

from debrep.build.config import BuildOn, Source
from debrep.build.depends import pool_listing, select_dependencies
from debrep.build.records import ChangelogRecord, CommitRecord, RecordStore
from debrep.build.sbuild import sbuild
from debrep.build.version import changelog_versions, git_state
from debrep.core.errors import ChangelogError, GitCommitError, NoChangelogVersionError
from debrep.core.utils import BUILD_DIR, LOGS_DIR, POOL_DIR, RECORD_DIR, log


class BuildOutcome(str, Enum):
    BUILT = "built"
    SKIPPED = "skipped"


def _changelog_version(source: Source, workspace: Path) -> str:
    path = workspace / "debian" / "changelog"
    try:
        versions = changelog_versions(path, limit=1)
    except (OSError, ValueError, ChangelogParseError) as e:
        raise ChangelogError(source.name, e) from e
    if not versions:
        raise NoChangelogVersionError(source.name)
    return versions[0]


def _git_state(source: Source, workspace: Path) -> tuple[str, str]:
    try:
        return git_state(workspace)
    except (subprocess.CalledProcessError, OSError) as e:
        raise GitCommitError(source.name, e) from e


def _run_sbuild(
    source: Source,
    workdir: Path,
    branch: str,
    workspace: Path,
    publish: Optional[Callable[[], None]],
) -> None:
    extra = select_dependencies(pool_listing(workdir / POOL_DIR, branch), source.depends)
    for path in extra:
        log.debug(f"extra package for {source.name}: {path}")
    sbuild(
        source,
        branch,
        workspace,
        extra,
        log_path=workdir / LOGS_DIR / source.name,
        cwd=workdir / BUILD_DIR,
    )
    if publish is not None:
        publish()


def pre_flight(
    source: Source,
    workdir: Path,
    branch: str,
    workspace: Path,
    force: bool = False,
    publish: Optional[Callable[[], None]] = None,
) -> BuildOutcome:
    """Build ``source`` unless its record shows the current state was built.

    Raises:
        ConditionalRuleError: If ``build_on`` names an unknown strategy.
        ChangelogError / NoChangelogVersionError: changelog strategy only.
        GitCommitError: commit strategy only.
        BuildError: Any failure of sbuild, of ``publish`` or of the record update.
    """
    strategy = BuildOn.parse(source.build_on)
    records = RecordStore(workdir / RECORD_DIR)

    if strategy is BuildOn.ALWAYS:
        _run_sbuild(source, workdir, branch, workspace, publish)
        return BuildOutcome.BUILT

    if strategy is BuildOn.CHANGELOG:
        version = _changelog_version(source, workspace)
        record = records.load(source.name)
        if not force and record == ChangelogRecord(version):
            log.info(f"{source.name} has already been built -- skipping")
            return BuildOutcome.SKIPPED

        log.info(f"building {source.name} at changelog version {version}")
        _run_sbuild(source, workdir, branch, workspace, publish)
        records.record_changelog(source.name, version)
        return BuildOutcome.BUILT

    git_branch, commit = _git_state(source, workspace)
    record = records.load(source.name)
    if not force and isinstance(record, CommitRecord) and record.contains(git_branch, commit):
        log.info(f"{source.name} has already been built -- skipping")
        return BuildOutcome.SKIPPED

    log.info(f"building {source.name} at git branch {git_branch}; commit {commit}")
    _run_sbuild(source, workdir, branch, workspace, publish)
    records.record_commit(source.name, git_branch, commit)
    return BuildOutcome.BUILT
