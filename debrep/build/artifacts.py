"""
Artifact linking for debrep workspaces.

Assets are hard linked into the workspace when possible and copied when the
asset tree and the workspace live on different filesystems.
"""

from __future__ import annotations

import errno
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from debrep.core.errors import DirectoryError, LinkError
from debrep.core.utils import log

# errno values meaning "a hard link is not possible here, copy instead"
_COPY_FALLBACK = {errno.EXDEV, errno.EPERM, errno.EMLINK}


@dataclass(frozen=True)
class LinkedArtifact:
    """One file placed into a workspace."""

    src: Path
    dst: Path
    copied: bool = False


def link_artifact(src: Path, dst_dir: Path) -> LinkedArtifact:
    """Place ``src`` into ``dst_dir`` under its own file name.

    Raises:
        LinkError: If the file can be neither linked nor copied.
    """
    src = Path(src)
    dst = Path(dst_dir) / src.name

    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        if dst.exists() or dst.is_symlink():
            dst.unlink()
    except OSError as e:
        raise LinkError(src, dst, e) from e

    try:
        os.link(src, dst)
        return LinkedArtifact(src=src, dst=dst)
    except OSError as e:
        if e.errno not in _COPY_FALLBACK:
            raise LinkError(src, dst, e) from e

    try:
        shutil.copy2(src, dst)
    except OSError as e:
        raise LinkError(src, dst, e) from e
    log.debug(f"copied {src} to {dst} (cannot hard link)")
    return LinkedArtifact(src=src, dst=dst, copied=True)


def link_tree(src_root: Path, dst_root: Path) -> list[LinkedArtifact]:
    """Mirror every file under ``src_root`` into ``dst_root``, keeping relative paths.

    Raises:
        DirectoryError: If a destination directory cannot be created.
        LinkError: If a file cannot be placed.
    """
    src_root = Path(src_root).resolve()
    dst_root = Path(dst_root)
    linked: list[LinkedArtifact] = []

    for dirpath, dirnames, filenames in os.walk(src_root):
        dirnames.sort()
        relative = Path(dirpath).relative_to(src_root)
        target = dst_root / relative
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryError(target, e) from e

        for filename in sorted(filenames):
            linked.append(link_artifact(Path(dirpath) / filename, target))

    return linked


def link_glob(root: Path, pattern: str, dst_dir: Path) -> list[LinkedArtifact]:
    """Link every file under ``root`` matching ``pattern`` into ``dst_dir``.

    Raises:
        LinkError: If ``pattern`` is empty or absolute, or a match cannot be placed.
    """
    try:
        matches = sorted(p for p in Path(root).glob(pattern) if p.is_file())
    except (NotImplementedError, ValueError) as e:
        raise LinkError(Path(root) / pattern, Path(dst_dir), e) from e
    if not matches:
        log.warning(f"asset pattern '{pattern}' matched nothing under {root}")
    return [link_artifact(path.resolve(), dst_dir) for path in matches]
