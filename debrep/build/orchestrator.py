"""
Build orchestrator for debrep.

Builds packages one at a time, in configuration order:

    workspace -> source -> assets -> debian -> pre-flight/sbuild -> pool -> record

The first failure stops the run.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable, Optional

from debrep.build.artifacts import link_glob, link_tree
from debrep.build.config import ArchiveLocation, Config, GitLocation, Source
from debrep.build.debian import resolve_debian
from debrep.build.phases import extract, fresh_directory, git_clone
from debrep.build.pool import mv_to_pool
from debrep.build.preflight import BuildOutcome, pre_flight
from debrep.core.errors import BuildError, DirectoryError, ExtractError, GitBranchError
from debrep.core.timing import StageTimer
from debrep.core.utils import (
    ASSETS_CACHE,
    ASSETS_PACKAGES,
    BUILD_DIR,
    POOL_DIR,
    SHARED_ASSETS,
    log,
)


# =============================================================================
# Stages
# =============================================================================


def _create_workspace(workspace: Path) -> None:
    try:
        fresh_directory(workspace)
    except OSError as e:
        raise DirectoryError(workspace, e) from e


def _stage_source(source: Source, workdir: Path, workspace: Path) -> None:
    location = source.location
    if isinstance(location, ArchiveLocation):
        archive = source.cached_archive(workdir / ASSETS_CACHE)
        log.dim(f"extracting {archive.name}")
        try:
            extract(archive, workspace)
        except OSError as e:
            raise ExtractError(archive, workspace, e) from e
    elif isinstance(location, GitLocation):
        log.dim(f"cloning {location.url}")
        try:
            git_clone(location.url, workspace, location.branch)
        except (subprocess.CalledProcessError, OSError) as e:
            raise GitBranchError(source.name, location.branch or "HEAD", e) from e


def _link_assets(source: Source, workdir: Path, workspace: Path) -> None:
    package_assets = workdir / ASSETS_PACKAGES / source.name
    if package_assets.is_dir():
        linked = link_tree(package_assets, workspace)
        log.debug(f"linked {len(linked)} package assets into {workspace}")

    for asset in source.assets:
        link_glob(workdir / SHARED_ASSETS, asset.src, workspace / asset.dst)


# =============================================================================
# Build
# =============================================================================


def build(source: Source, workdir: Path, branch: str, force: bool = False) -> BuildOutcome:
    """Build one package and publish its output into the pool.

    Args:
        source: The package to build.
        workdir: Root of the debrep working directory.
        branch: Distribution the package is built for and published into.
        force: Build even if the record shows the current state was built.

    Raises:
        BuildError: The error of the first stage that failed.
    """
    workdir = Path(workdir).resolve()
    build_dir = workdir / BUILD_DIR
    workspace = build_dir / source.name
    timer = StageTimer(source.name)

    def publish() -> None:
        mv_to_pool(build_dir, source.name, workdir / POOL_DIR, branch, source.keep_source)

    log.header(f"attempting to build {source.name}")
    try:
        with timer.stage("workspace"):
            _create_workspace(workspace)
        with timer.stage("source"):
            _stage_source(source, workdir, workspace)
        with timer.stage("assets"):
            _link_assets(source, workdir, workspace)
        with timer.stage("debian"):
            resolve_debian(source, workdir, workspace)
        # Covers sbuild and publishing; the record is written after both
        with timer.stage("build"):
            outcome = pre_flight(source, workdir, branch, workspace, force, publish=publish)
        if outcome is BuildOutcome.BUILT:
            log.success(f"{source.name} built")
    except BuildError as e:
        if e.package is None:
            e.package = source.name
        raise
    finally:
        log.debug(timer.summary())

    return outcome


# =============================================================================
# Run Loops
# =============================================================================


class BuildOrchestrator:
    """Builds a set of configured packages sequentially."""

    def __init__(self, config: Config, workdir: Path, force: bool = False):
        self.config = config
        self.workdir = Path(workdir)
        self.force = force
        self.outcomes: dict[str, BuildOutcome] = {}

    def select(self, names: Optional[Iterable[str]] = None) -> list[Source]:
        """Sources to build, in configuration order. Unknown names are reported."""
        if names is None:
            return list(self.config.sources)

        wanted = set(names)
        for name in sorted(wanted):
            if self.config.find(name) is None:
                log.warning(f"no source named '{name}' in {self.config.path or 'configuration'}")
        return [s for s in self.config.sources if s.name in wanted]

    def run(self, names: Optional[Iterable[str]] = None) -> dict[str, BuildOutcome]:
        """Build the selected packages; raises the first BuildError."""
        for source in self.select(names):
            self.outcomes[source.name] = build(source, self.workdir, self.config.archive, self.force)

        built = sum(1 for o in self.outcomes.values() if o is BuildOutcome.BUILT)
        skipped = len(self.outcomes) - built
        log.info(f"{built} built, {skipped} skipped")
        return self.outcomes


def build_all(config: Config, workdir: Path, force: bool = False) -> dict[str, BuildOutcome]:
    """Build every configured source."""
    return BuildOrchestrator(config, workdir, force).run()


def build_packages(
    config: Config,
    workdir: Path,
    names: Iterable[str],
    force: bool = False,
) -> dict[str, BuildOutcome]:
    """Build only the named sources."""
    return BuildOrchestrator(config, workdir, force).run(names)
