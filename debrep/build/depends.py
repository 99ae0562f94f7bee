"""
Extra-dependency selection for debrep builds.

Packages already in the pool can be handed to sbuild as ``--extra-package``
arguments. Which ones is decided by matching their names against the
``depends`` patterns of a source.

Scoring (lower is better):
  0  exact name match               depends = ["libfoo"]  ->  libfoo_1.0_amd64.deb
  1  name starts with pattern + one of "-", ".", "+"   ->  libfoo-dev_1.0_amd64.deb
  2  pattern appears anywhere in the name              ->  python3-libfoo_1.0_all.deb

A package takes its best score over all patterns. Ties are broken by the
position of the matching pattern, then package name, then version (newest
first), then path, so an unchanged pool always gives the same list.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

from debian.debian_support import version_compare

from debrep.core.utils import POOL_COMPONENT

PACKAGE_SUFFIXES = (".deb", ".udeb", ".ddeb")
_PREFIX_SEPARATORS = ("-", ".", "+")


@dataclass(frozen=True)
class PoolPackage:
    """A built package file found in the pool."""

    path: Path
    name: str
    version: str
    arch: str


@dataclass(frozen=True)
class Candidate:
    """A pool package that matched one of the requested patterns."""

    package: PoolPackage
    score: int
    pattern_index: int


def parse_package_filename(path: Path) -> Optional[PoolPackage]:
    """Parse ``name_version_arch.deb``; None if the file is not a package."""
    path = Path(path)
    if path.suffix not in PACKAGE_SUFFIXES:
        return None
    parts = path.stem.split("_")
    if len(parts) < 2:
        return None
    arch = parts[2] if len(parts) > 2 else ""
    return PoolPackage(path=path, name=parts[0], version=parts[1], arch=arch)


def walk_debs(root: Path) -> Iterator[PoolPackage]:
    """Yield every package file below ``root``; nothing if it does not exist."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            package = parse_package_filename(Path(dirpath) / filename)
            if package is not None:
                yield package


def pool_listing(pool_root: Path, branch: str) -> list[PoolPackage]:
    """Built packages of the main component of ``branch``."""
    return list(walk_debs(Path(pool_root) / branch / POOL_COMPONENT))


def match_score(name: str, pattern: str) -> Optional[int]:
    """Similarity of a package name to one pattern; None if unrelated."""
    if not pattern:
        return None
    if name == pattern:
        return 0
    if any(name.startswith(pattern + sep) for sep in _PREFIX_SEPARATORS):
        return 1
    if pattern in name:
        return 2
    return None


def match_deb(package: PoolPackage, patterns: list[str]) -> Optional[Candidate]:
    """Best match of a pool package against the requested patterns."""
    best: Optional[Candidate] = None
    for index, pattern in enumerate(patterns):
        score = match_score(package.name, pattern)
        if score is None:
            continue
        if best is None or (score, index) < (best.score, best.pattern_index):
            best = Candidate(package=package, score=score, pattern_index=index)
    return best


def _compare(a: Candidate, b: Candidate) -> int:
    key_a = (a.score, a.pattern_index, a.package.name)
    key_b = (b.score, b.pattern_index, b.package.name)
    if key_a != key_b:
        return -1 if key_a < key_b else 1

    # Newest version first; unparseable versions fall through to the path
    try:
        by_version = version_compare(b.package.version, a.package.version)
    except ValueError:
        by_version = 0
    if by_version:
        return by_version

    path_a, path_b = str(a.package.path), str(b.package.path)
    return (path_a > path_b) - (path_a < path_b)


def select_dependencies(pool: Iterable[PoolPackage], patterns: list[str]) -> list[Path]:
    """Ranked pool files to pass to sbuild as extra packages."""
    if not patterns:
        return []

    candidates = [c for c in (match_deb(p, patterns) for p in pool) if c is not None]
    candidates.sort(key=functools.cmp_to_key(_compare))
    return [c.package.path for c in candidates]
