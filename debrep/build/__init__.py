"""
debrep.build - Package build pipeline.

Stages each package in a fresh workspace, decides from its build record whether
it needs building, runs sbuild and publishes the result into the pool.
"""

from debrep.build.config import (
    BuildOn,
    Asset,
    ArchiveLocation,
    GitLocation,
    DebianArchive,
    DebianBranch,
    Source,
    Direct,
    Config,
    load_config,
)
from debrep.build.preflight import BuildOutcome, pre_flight
from debrep.build.orchestrator import (
    BuildOrchestrator,
    build,
    build_all,
    build_packages,
)

__all__ = [
    # Configuration
    "BuildOn",
    "Asset",
    "ArchiveLocation",
    "GitLocation",
    "DebianArchive",
    "DebianBranch",
    "Source",
    "Direct",
    "Config",
    "load_config",
    # Decision
    "BuildOutcome",
    "pre_flight",
    # Orchestrator
    "BuildOrchestrator",
    "build",
    "build_all",
    "build_packages",
]
