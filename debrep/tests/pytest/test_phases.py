"""
Tests for workspace creation and source extraction.
"""

from __future__ import annotations

import tarfile
import zipfile
from pathlib import Path

import pytest

from debrep.build.phases import extract, extract_debian, fresh_directory


def _tarball(path: Path, files: dict[str, str]) -> Path:
    staging = path.parent / "staging"
    for name, text in files.items():
        (staging / name).parent.mkdir(parents=True, exist_ok=True)
        (staging / name).write_text(text)
    with tarfile.open(path, "w:gz") as tf:
        for name in files:
            tf.add(staging / name, arcname=name)
    return path


@pytest.mark.evergreen
class TestFreshDirectory:
    """fresh_directory always leaves an empty directory."""

    def test_removes_previous_contents(self, tmp_path: Path) -> None:
        ws = tmp_path / "build" / "foo"
        (ws / "old").mkdir(parents=True)
        (ws / "old" / "file").write_text("stale")

        fresh_directory(ws)
        assert ws.is_dir()
        assert list(ws.iterdir()) == []


@pytest.mark.evergreen
class TestExtract:
    """extract unpacks archives, stripping a single top-level directory."""

    def test_strips_single_top_dir(self, tmp_path: Path) -> None:
        archive = _tarball(tmp_path / "foo-1.0.tar.gz", {
            "foo-1.0/Makefile": "all:\n",
            "foo-1.0/src/main.c": "int main;\n",
        })
        dest = tmp_path / "ws"

        extract(archive, dest)

        assert (dest / "Makefile").read_text() == "all:\n"
        assert (dest / "src" / "main.c").exists()
        assert sorted(p.name for p in tmp_path.iterdir() if p.name.startswith(".extract-")) == []

    def test_flat_archive(self, tmp_path: Path) -> None:
        archive = _tarball(tmp_path / "flat.tar.gz", {"Makefile": "", "README": ""})
        dest = tmp_path / "ws"

        extract(archive, dest)
        assert sorted(p.name for p in dest.iterdir()) == ["Makefile", "README"]

    def test_zip(self, tmp_path: Path) -> None:
        archive = tmp_path / "foo.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("foo/configure", "#!/bin/sh\n")
        dest = tmp_path / "ws"

        extract(archive, dest)
        assert (dest / "configure").exists()

    def test_missing_archive(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            extract(tmp_path / "missing.tar.gz", tmp_path / "ws")

    def test_not_an_archive(self, tmp_path: Path) -> None:
        bogus = tmp_path / "foo.tar.gz"
        bogus.write_text("plain text")
        with pytest.raises(OSError):
            extract(bogus, tmp_path / "ws")

    def test_keep_single_top_dir(self, tmp_path: Path) -> None:
        archive = _tarball(tmp_path / "debian.tar.gz", {"debian/control": "Source: foo\n"})
        dest = tmp_path / "ws"

        extract(archive, dest, strip_root=False)
        assert (dest / "debian" / "control").read_text() == "Source: foo\n"


@pytest.mark.evergreen
class TestExtractDebian:
    """extract_debian keeps only the debian/ directory of an archive."""

    def test_under_top_level_directory(self, tmp_path: Path) -> None:
        archive = _tarball(tmp_path / "foo-debian.tar.gz", {
            "foo-debian/debian/rules": "#!/usr/bin/make -f\n",
            "foo-debian/NOTES": "",
        })
        workspace = tmp_path / "ws"
        workspace.mkdir()

        assert extract_debian(archive, workspace) == workspace / "debian"
        assert (workspace / "debian" / "rules").exists()
        assert not (workspace / "NOTES").exists()

    def test_no_debian_directory(self, tmp_path: Path) -> None:
        archive = _tarball(tmp_path / "flat.tar.gz", {"control": "", "rules": ""})
        workspace = tmp_path / "ws"
        workspace.mkdir()

        with pytest.raises(FileNotFoundError):
            extract_debian(archive, workspace)
        assert list(workspace.iterdir()) == []
