"""
Tests for changelog and git inspection of a workspace.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable
from unittest.mock import patch

import pytest

from debrep.build.version import changelog_versions, git_state


@pytest.mark.evergreen
class TestChangelogVersions:
    """changelog_versions reads versions newest first."""

    def test_first_entry(self, tmp_path: Path, changelog: Callable[..., Path]) -> None:
        path = changelog(tmp_path / "debian", "foo", "1.2.3-1", "1.2.2-1")
        assert changelog_versions(path) == ["1.2.3-1"]

    def test_limit(self, tmp_path: Path, changelog: Callable[..., Path]) -> None:
        path = changelog(tmp_path / "debian", "foo", "2:1.0-2", "2:1.0-1", "0.9-1")
        assert changelog_versions(path, limit=2) == ["2:1.0-2", "2:1.0-1"]

    def test_empty_changelog(self, tmp_path: Path) -> None:
        path = tmp_path / "changelog"
        path.write_text("")
        assert changelog_versions(path) == []

    def test_missing_changelog(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            changelog_versions(tmp_path / "changelog")


@pytest.mark.evergreen
class TestGitState:
    """git_state asks git for the checked-out branch and commit."""

    def test_branch_and_commit(self, tmp_path: Path) -> None:
        outputs = [
            subprocess.CompletedProcess([], 0, stdout="main\n", stderr=""),
            subprocess.CompletedProcess([], 0, stdout="abcd1234\n", stderr=""),
        ]
        with patch("debrep.build.version.run_cmd", side_effect=outputs) as run:
            assert git_state(tmp_path) == ("main", "abcd1234")

        assert run.call_args_list[0].args[0] == ["git", "rev-parse", "--abbrev-ref", "HEAD"]
        assert run.call_args_list[1].args[0] == ["git", "rev-parse", "HEAD"]
        assert run.call_args_list[0].kwargs["cwd"] == tmp_path
