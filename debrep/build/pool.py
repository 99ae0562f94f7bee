"""
Publishing finished builds into the debrep pool.

sbuild leaves its output next to the workspace, in the build directory. After
a successful build those files are sorted into the pool:

    <pool>/<branch>/main/binary/<prefix>/<source>/   .deb .udeb .ddeb
    <pool>/<branch>/main/source/<prefix>/<source>/   .dsc .tar.* .diff.gz

Everything else sbuild writes (.changes, .buildinfo, build logs) is removed.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from debrep.core.errors import PoolError
from debrep.core.utils import POOL_COMPONENT, log, pool_prefix

BINARY_SUFFIXES = (".deb", ".udeb", ".ddeb")


def is_source_artifact(name: str) -> bool:
    return name.endswith(".dsc") or ".tar." in name or name.endswith(".diff.gz")


def _move(src: Path, dst_dir: Path) -> Path:
    dst_dir.mkdir(parents=True, exist_ok=True)
    dst = dst_dir / src.name
    shutil.move(str(src), str(dst))
    return dst


def mv_to_pool(build_dir: Path, package: str, pool_root: Path, branch: str, keep_source: bool) -> list[Path]:
    """Move the output of the build of ``package`` from ``build_dir`` into the pool.

    Only files directly inside ``build_dir`` are considered; workspaces are
    directories and stay where they are.

    Raises:
        PoolError: On any filesystem failure.
    """
    component = Path(pool_root) / branch / POOL_COMPONENT
    prefix = pool_prefix(package)
    binary_dir = component / "binary" / prefix / package
    source_dir = component / "source" / prefix / package

    published: list[Path] = []
    try:
        for entry in sorted(Path(build_dir).iterdir()):
            if not entry.is_file():
                continue
            if entry.name.endswith(BINARY_SUFFIXES):
                published.append(_move(entry, binary_dir))
            elif is_source_artifact(entry.name) and keep_source:
                published.append(_move(entry, source_dir))
            else:
                entry.unlink()
    except OSError as e:
        raise PoolError(package, e) from e

    for path in published:
        log.dim(f"published {path.name}")
    return published
