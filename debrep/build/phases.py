"""
Build phases for debrep.

Filesystem and git operations the orchestrator strings together. These raise
the underlying ``OSError`` / ``CalledProcessError``; callers wrap them into the
error kind of their stage.
"""

from __future__ import annotations

import shutil
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Optional

from debrep.core.utils import log, run_cmd


# =============================================================================
# Workspace
# =============================================================================


def fresh_directory(path: Path) -> Path:
    """Create ``path`` as an empty directory, removing anything already there."""
    if path.exists():
        log.debug(f"removing stale workspace {path}")
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


# =============================================================================
# Archive Extraction
# =============================================================================


def _unpack(archive: Path, dest: Path) -> None:
    if zipfile.is_zipfile(archive):
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(dest)
        return

    try:
        with tarfile.open(archive) as tf:
            tf.extractall(dest, filter="data")
    except tarfile.TarError as e:
        raise OSError(f"{archive} is not a supported archive: {e}") from e


def extract(archive: Path, dest: Path, strip_root: bool = True) -> None:
    """Unpack ``archive`` into ``dest``.

    Tarballs usually wrap everything in one ``name-version/`` directory; when
    they do and ``strip_root`` is set, its contents are moved up so ``dest`` is
    the source root.
    """
    archive = Path(archive)
    dest = Path(dest)
    if not archive.is_file():
        raise FileNotFoundError(f"archive not found: {archive}")

    dest.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(prefix=".extract-", dir=dest.parent) as scratch:
        scratch_path = Path(scratch)
        _unpack(archive, scratch_path)

        entries = list(scratch_path.iterdir())
        single = len(entries) == 1 and entries[0].is_dir()
        root = entries[0] if strip_root and single else scratch_path

        for entry in root.iterdir():
            target = dest / entry.name
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()
            shutil.move(str(entry), str(target))


def extract_debian(archive: Path, workspace: Path) -> Path:
    """Unpack the debian/ directory of ``archive`` into ``workspace``.

    debian/ may sit at the top of the archive or under its single top-level
    directory. Nothing else from the archive is kept.
    """
    dst = workspace / "debian"
    with tempfile.TemporaryDirectory(prefix=".debian-", dir=workspace.parent) as scratch:
        scratch_path = Path(scratch)
        extract(archive, scratch_path, strip_root=False)

        entries = list(scratch_path.iterdir())
        candidates = [scratch_path / "debian"]
        if len(entries) == 1 and entries[0].is_dir():
            candidates.append(entries[0] / "debian")

        src = next((c for c in candidates if c.is_dir()), None)
        if src is None:
            raise FileNotFoundError(f"no debian directory in {Path(archive).name}")

        if dst.is_dir() and not dst.is_symlink():
            shutil.rmtree(dst)
        elif dst.exists() or dst.is_symlink():
            dst.unlink()
        shutil.move(str(src), str(dst))
    return dst


# =============================================================================
# Directory Mirroring
# =============================================================================


def rsync(src: Path, dst: Path) -> None:
    """Make ``dst`` an exact copy of ``src``, including deletions."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    run_cmd(["rsync", "-a", "--delete", f"{src}/", f"{dst}/"], capture=True)


# =============================================================================
# Git
# =============================================================================


def git_clone(url: str, dest: Path, branch: Optional[str] = None) -> None:
    """Clone ``url`` into ``dest`` (which must be absent or empty)."""
    cmd = ["git", "clone"]
    if branch:
        cmd.extend(["-b", branch])
    cmd.extend([url, str(dest)])
    run_cmd(cmd, capture=True)


def merge_branch(url: str, branch: str, workspace: Path) -> Path:
    """Copy the debian/ directory of ``branch`` of ``url`` into ``workspace``.

    The clone happens in a private scratch directory that is removed afterwards.
    Returns the debian/ directory that was written.
    """
    dst = workspace / "debian"
    with tempfile.TemporaryDirectory(prefix="debrep-branch-") as scratch:
        checkout = Path(scratch) / "repo"
        git_clone(url, checkout, branch)

        src = checkout / "debian"
        if not src.is_dir():
            raise FileNotFoundError(f"branch {branch} of {url} has no debian directory")

        if dst.exists():
            shutil.rmtree(dst)
        shutil.copytree(src, dst, symlinks=True)
    return dst
