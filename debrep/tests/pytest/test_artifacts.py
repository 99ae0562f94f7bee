"""
Tests for placing asset files into workspaces.
"""

from __future__ import annotations

import errno
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from debrep.build.artifacts import link_artifact, link_glob, link_tree
from debrep.core.errors import LinkError


@pytest.fixture
def asset(tmp_path: Path) -> Path:
    path = tmp_path / "assets" / "config.ini"
    path.parent.mkdir(parents=True)
    path.write_text("[main]\n")
    return path


# =============================================================================
# link_artifact
# =============================================================================


@pytest.mark.evergreen
class TestLinkArtifact:
    """link_artifact hard links, or copies across filesystems."""

    def test_hard_link(self, tmp_path: Path, asset: Path) -> None:
        result = link_artifact(asset, tmp_path / "ws" / "etc")

        assert result.dst == tmp_path / "ws" / "etc" / "config.ini"
        assert result.copied is False
        assert os.path.samefile(asset, result.dst)

    def test_replaces_existing_file(self, tmp_path: Path, asset: Path) -> None:
        dst_dir = tmp_path / "ws"
        dst_dir.mkdir()
        (dst_dir / "config.ini").write_text("stale")

        link_artifact(asset, dst_dir)
        assert (dst_dir / "config.ini").read_text() == "[main]\n"

    def test_cross_device_falls_back_to_copy(self, tmp_path: Path, asset: Path) -> None:
        cross_device = OSError(errno.EXDEV, "Invalid cross-device link")
        with patch("debrep.build.artifacts.os.link", side_effect=cross_device):
            result = link_artifact(asset, tmp_path / "ws")

        assert result.copied is True
        assert result.dst.read_text() == "[main]\n"
        assert not os.path.samefile(asset, result.dst)

    def test_missing_source_raises_link_error(self, tmp_path: Path) -> None:
        with pytest.raises(LinkError) as exc_info:
            link_artifact(tmp_path / "missing", tmp_path / "ws")
        assert exc_info.value.src == tmp_path / "missing"


# =============================================================================
# link_tree / link_glob
# =============================================================================


@pytest.mark.evergreen
class TestLinkTree:
    """link_tree mirrors a directory, keeping relative paths."""

    def test_mirrors_structure(self, tmp_path: Path) -> None:
        src = tmp_path / "packages" / "foo"
        (src / "debian" / "patches").mkdir(parents=True)
        (src / "README").write_text("readme")
        (src / "debian" / "patches" / "01-fix.patch").write_text("patch")

        linked = link_tree(src, tmp_path / "ws")

        assert (tmp_path / "ws" / "README").read_text() == "readme"
        assert (tmp_path / "ws" / "debian" / "patches" / "01-fix.patch").read_text() == "patch"
        assert len(linked) == 2


@pytest.mark.evergreen
class TestLinkGlob:
    """link_glob links every match of a pattern into one directory."""

    def test_matches_in_sorted_order(self, tmp_path: Path) -> None:
        share = tmp_path / "share"
        (share / "fonts").mkdir(parents=True)
        for name in ("b.ttf", "a.ttf", "c.otf"):
            (share / "fonts" / name).write_text(name)

        linked = link_glob(share, "fonts/*.ttf", tmp_path / "ws" / "fonts")

        assert [a.dst.name for a in linked] == ["a.ttf", "b.ttf"]
        assert not (tmp_path / "ws" / "fonts" / "c.otf").exists()

    def test_no_match_warns(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert link_glob(tmp_path, "*.none", tmp_path / "ws") == []
        assert "matched nothing" in capsys.readouterr().out

    @pytest.mark.parametrize("pattern", ["/etc/*.conf", ""])
    def test_unusable_pattern(self, tmp_path: Path, pattern: str) -> None:
        with pytest.raises(LinkError):
            link_glob(tmp_path, pattern, tmp_path / "ws")
        assert not (tmp_path / "ws").exists()
