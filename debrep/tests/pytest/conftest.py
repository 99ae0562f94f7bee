"""
Shared pytest fixtures for debrep tests.

Provides a throwaway working directory laid out the way debrep expects, and
stand-ins for sbuild and git so no test needs either tool installed.

Test Tier Markers:
  @pytest.mark.evergreen - Tests that always run, never skip (production tests)
  @pytest.mark.dev       - Development/WIP tests, toggle-able
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest

from debrep.core.utils import (
    ASSETS_CACHE,
    ASSETS_PACKAGES,
    BUILD_DIR,
    DEBIAN_DIR,
    LOGS_DIR,
    POOL_DIR,
    RECORD_DIR,
    SHARED_ASSETS,
    log,
)


# =============================================================================
# Test Data Helpers
# =============================================================================


CHANGELOG_TEMPLATE = """\
{name} ({version}) cosmic; urgency=medium

  * New upstream release.

 -- Jane Doe <jane@example.com>  Mon, 01 Oct 2018 12:00:00 +0000
"""


def write_changelog(debian_dir: Path, name: str, *versions: str) -> Path:
    """Write a debian/changelog with one entry per version, newest first."""
    debian_dir.mkdir(parents=True, exist_ok=True)
    path = debian_dir / "changelog"
    path.write_text("\n".join(CHANGELOG_TEMPLATE.format(name=name, version=v) for v in versions))
    return path


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test tiers."""
    config.addinivalue_line(
        "markers",
        "evergreen: tests that always run, never skip (production tests)"
    )
    config.addinivalue_line(
        "markers",
        "dev: development/WIP tests, toggle-able for active development"
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def quiet_logger() -> None:
    """Keep log output plain so assertions on captured text are stable."""
    log.set_color(False)
    log.set_verbose(False)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """A debrep working directory with every top-level directory created."""
    root = tmp_path / "work"
    for relative in (
        ASSETS_CACHE,
        ASSETS_PACKAGES,
        SHARED_ASSETS,
        BUILD_DIR,
        DEBIAN_DIR,
        LOGS_DIR,
        POOL_DIR,
        RECORD_DIR,
    ):
        (root / relative).mkdir(parents=True)
    return root


@pytest.fixture
def changelog() -> Callable[..., Path]:
    """The write_changelog helper, for tests that build their own debian/."""
    return write_changelog


@pytest.fixture
def fake_sbuild(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Replace the sbuild call of the pre-flight engine with a recorder."""
    mock = MagicMock(name="sbuild")
    monkeypatch.setattr("debrep.build.preflight.sbuild", mock)
    return mock


@pytest.fixture
def fake_git_state(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Replace workspace git inspection; set ``.return_value`` to (branch, commit)."""
    mock = MagicMock(name="git_state", return_value=("main", "abcd"))
    monkeypatch.setattr("debrep.build.preflight.git_state", mock)
    return mock
