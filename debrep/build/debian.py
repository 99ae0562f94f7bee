"""
Debian control metadata for debrep workspaces.

A source gets its debian/ directory from exactly one place:

  DebianArchive   a separate archive, fetched, checksummed and unpacked
  DebianBranch    the debian/ directory of a branch of another repository
  (nothing)       debian/<name>/ in the working directory, if present
"""

from __future__ import annotations

import http.client
import subprocess
import urllib.error
from pathlib import Path
from typing import Optional

from debrep import fetch
from debrep.build import phases
from debrep.build.config import DebianArchive, DebianBranch, Source
from debrep.core.errors import ChecksumError, DebianArchiveError, ExtractError, GitBranchError, RsyncError
from debrep.core.utils import ASSETS_CACHE, DEBIAN_DIR, log


def from_archive(source: Source, origin: DebianArchive, workdir: Path, workspace: Path) -> Path:
    """Fetch, verify and unpack a debian/ archive into ``workspace``.

    Raises:
        DebianArchiveError: If the archive cannot be downloaded.
        ChecksumError: If the archive does not match its checksum.
        ExtractError: If it cannot be unpacked or holds no debian/ directory.
    """
    item = fetch.debian_archive_item(source.name, origin, workdir / ASSETS_CACHE)
    expected = fetch.normalize_checksum(origin.checksum)

    cached = item.destination
    if not cached.is_file() or fetch.sha256_of_file(cached) != expected:
        log.dim(f"fetching debian archive for {source.name}")
        try:
            # Checked against the expected digest below
            fetch.download(fetch.FetchItem(item.name, item.url, item.destination))
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise DebianArchiveError(source.name, origin.url, e) from e

    actual = fetch.sha256_of_file(cached)
    if actual != expected:
        raise ChecksumError(cached, expected, actual)

    try:
        return phases.extract_debian(cached, workspace)
    except OSError as e:
        raise ExtractError(cached, workspace, e) from e


def from_branch(source: Source, origin: DebianBranch, workspace: Path) -> Path:
    """Copy debian/ from a branch of another repository.

    Raises:
        GitBranchError: If the branch cannot be cloned or has no debian/.
    """
    log.dim(f"merging debian/ from {origin.url} ({origin.branch})")
    try:
        return phases.merge_branch(origin.url, origin.branch, workspace)
    except (subprocess.CalledProcessError, OSError) as e:
        raise GitBranchError(source.name, origin.branch, e) from e


def from_local(source: Source, workdir: Path, workspace: Path) -> Optional[Path]:
    """Mirror debian/<name>/ of the working directory, if it exists.

    Raises:
        RsyncError: If mirroring fails.
    """
    src = workdir / DEBIAN_DIR / source.name
    if not src.is_dir():
        return None

    dst = workspace / "debian"
    try:
        phases.rsync(src, dst)
    except (subprocess.CalledProcessError, OSError) as e:
        raise RsyncError(src, dst, e) from e
    return dst


def resolve_debian(source: Source, workdir: Path, workspace: Path) -> Optional[Path]:
    """Populate ``workspace/debian`` for ``source``; returns it, or None if untouched."""
    origin = source.debian
    if isinstance(origin, DebianArchive):
        return from_archive(source, origin, workdir, workspace)
    if isinstance(origin, DebianBranch):
        return from_branch(source, origin, workspace)
    return from_local(source, workdir, workspace)
