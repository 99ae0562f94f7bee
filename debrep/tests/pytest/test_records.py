"""
Tests for build record files.

Records are read and written bit-exactly: a discriminator line, then the
changelog version or the (branch, commit) pairs, joined with newlines.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from debrep.build.records import (
    ChangelogRecord,
    CommitRecord,
    RecordStore,
    parse_record,
)
from debrep.core.errors import RecordUpdateError


# =============================================================================
# Parsing
# =============================================================================


@pytest.mark.evergreen
class TestParseRecord:
    """parse_record reads lines according to the discriminator."""

    def test_changelog_record(self) -> None:
        assert parse_record("changelog\n1.2.3") == ChangelogRecord("1.2.3")

    def test_trailing_newline_tolerated(self) -> None:
        assert parse_record("changelog\n1.2.3\n") == ChangelogRecord("1.2.3")

    def test_commit_record_keeps_order(self) -> None:
        record = parse_record("commit\nmain abcd\ndev ef01")
        assert record == CommitRecord((("main", "abcd"), ("dev", "ef01")))

    def test_commit_record_without_pairs(self) -> None:
        assert parse_record("commit") == CommitRecord(())

    def test_empty_file_is_no_record(self) -> None:
        assert parse_record("") is None

    def test_unknown_discriminator_is_no_record(self) -> None:
        assert parse_record("tarball\n1.0") is None

    def test_changelog_record_is_not_read_as_commit(self) -> None:
        """A version line never turns into a (branch, commit) pair."""
        record = parse_record("changelog\nmain abcd")
        assert isinstance(record, ChangelogRecord)
        assert record.version == "main abcd"


# =============================================================================
# Serialization
# =============================================================================


@pytest.mark.evergreen
class TestSerialize:
    """Records serialize without a trailing newline."""

    def test_changelog(self) -> None:
        assert ChangelogRecord("1.2.3").serialize() == "changelog\n1.2.3"

    def test_commit(self) -> None:
        record = CommitRecord().appended("main", "abcd").appended("dev", "ef01")
        assert record.serialize() == "commit\nmain abcd\ndev ef01"

    def test_append_existing_pair_is_noop(self) -> None:
        record = CommitRecord((("main", "abcd"),))
        assert record.appended("main", "abcd") is record


# =============================================================================
# RecordStore
# =============================================================================


@pytest.mark.evergreen
class TestRecordStore:
    """RecordStore reads and writes one file per package."""

    def test_missing_record_loads_as_none(self, tmp_path: Path) -> None:
        assert RecordStore(tmp_path).load("foo") is None

    def test_record_changelog_overwrites(self, tmp_path: Path) -> None:
        store = RecordStore(tmp_path / "record")
        store.record_changelog("foo", "1.0")
        store.record_changelog("foo", "2.0")
        assert (tmp_path / "record" / "foo").read_text() == "changelog\n2.0"

    def test_record_commit_appends(self, tmp_path: Path) -> None:
        store = RecordStore(tmp_path)
        store.record_commit("bar", "main", "abcd")
        store.record_commit("bar", "dev", "ef01")
        assert (tmp_path / "bar").read_text() == "commit\nmain abcd\ndev ef01"

    def test_record_commit_replaces_changelog_record(self, tmp_path: Path) -> None:
        store = RecordStore(tmp_path)
        store.record_changelog("bar", "1.0")
        store.record_commit("bar", "main", "abcd")
        assert (tmp_path / "bar").read_text() == "commit\nmain abcd"

    def test_save_failure_raises_record_update_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "record"
        blocker.write_text("not a directory")

        with pytest.raises(RecordUpdateError) as exc_info:
            RecordStore(blocker).record_changelog("foo", "1.0")
        assert exc_info.value.package == "foo"
