"""
Build records for debrep.

One small text file per package remembers what was last built, so that an
unchanged package can be skipped on the next run. The first line says how
the rest of the file is read:

    changelog            commit
    1.2.3                master 3f1c2e9...
                         dev 77ab01d...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from debrep.core.errors import ReadError, RecordUpdateError


# =============================================================================
# Record Shapes
# =============================================================================


@dataclass(frozen=True)
class ChangelogRecord:
    """Last changelog version built. Versions only go up, so one is enough."""

    version: str

    def serialize(self) -> str:
        return f"changelog\n{self.version}"


@dataclass(frozen=True)
class CommitRecord:
    """Every (branch, commit) pair built so far, oldest first."""

    entries: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def contains(self, branch: str, commit: str) -> bool:
        return (branch, commit) in self.entries

    def appended(self, branch: str, commit: str) -> "CommitRecord":
        if self.contains(branch, commit):
            return self
        return CommitRecord(self.entries + ((branch, commit),))

    def serialize(self) -> str:
        lines = ["commit"] + [f"{branch} {commit}" for branch, commit in self.entries]
        return "\n".join(lines)


BuildRecord = Union[ChangelogRecord, CommitRecord]


def parse_record(text: str) -> Optional[BuildRecord]:
    """Parse record file contents; ``None`` for an empty or unknown record."""
    lines = text.splitlines()
    if not lines:
        return None

    kind, rest = lines[0].strip(), lines[1:]
    if kind == "changelog":
        if not rest or not rest[0].strip():
            return None
        return ChangelogRecord(rest[0].strip())

    if kind == "commit":
        entries = []
        for line in rest:
            fields = line.split()
            if len(fields) >= 2:
                entries.append((fields[0], fields[1]))
        return CommitRecord(tuple(entries))

    return None


# =============================================================================
# Record Store
# =============================================================================


class RecordStore:
    """Reads and writes the per-package record files under one directory."""

    def __init__(self, record_dir: Path):
        self.record_dir = Path(record_dir)

    def path_for(self, package: str) -> Path:
        return self.record_dir / package

    def load(self, package: str) -> Optional[BuildRecord]:
        """Load the record of a package, or None if it was never built."""
        path = self.path_for(package)
        if not path.exists():
            return None
        try:
            return parse_record(path.read_text())
        except OSError as e:
            raise ReadError(path, e) from e

    def save(self, package: str, record: BuildRecord) -> None:
        """Replace the record of a package."""
        path = self.path_for(package)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(record.serialize())
        except OSError as e:
            raise RecordUpdateError(package, e) from e

    def record_changelog(self, package: str, version: str) -> ChangelogRecord:
        """Overwrite the record with the newly built changelog version."""
        record = ChangelogRecord(version)
        self.save(package, record)
        return record

    def record_commit(self, package: str, branch: str, commit: str) -> CommitRecord:
        """Append a (branch, commit) pair, keeping every pair recorded before.

        A record of another kind is replaced by a fresh commit record.
        """
        existing = self.load(package)
        if not isinstance(existing, CommitRecord):
            existing = CommitRecord()
        record = existing.appended(branch, commit)
        self.save(package, record)
        return record
