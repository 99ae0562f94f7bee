"""
Error taxonomy for debrep builds.

Every stage of a package build raises one of these; the fields stay on the
exception so callers and tests can inspect which package and paths failed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ConfigError(Exception):
    """The configuration file is missing, unreadable, or malformed."""

    def __init__(self, file: Path, reason: str):
        self.file = file
        self.reason = reason
        super().__init__(f"invalid configuration in {file}: {reason}")


class BuildError(Exception):
    """Base class for every failure of a package build."""

    package: Optional[str] = None


class BuildFailedError(BuildError):
    def __init__(self, package: str):
        self.package = package
        super().__init__(f"build failed for {package}")


class ChangelogError(BuildError):
    def __init__(self, package: str, cause: Exception):
        self.package = package
        self.cause = cause
        super().__init__(f"failed to get changelog for {package}: {cause}")


class ChecksumError(BuildError):
    def __init__(self, file: Path, expected: str, actual: str):
        self.file = file
        self.expected = expected
        self.actual = actual
        super().__init__(f"checksum mismatch for {file}: expected {expected}, got {actual}")


class CommandError(BuildError):
    def __init__(self, cmd: str, cause: Exception):
        self.cmd = cmd
        self.cause = cause
        super().__init__(f"{cmd} command failed to execute: {cause}")


class ConditionalRuleError(BuildError):
    def __init__(self, rule: str):
        self.rule = rule
        super().__init__(f"unsupported conditional build rule: {rule}")


class DebianArchiveError(BuildError):
    def __init__(self, package: str, url: str, cause: object):
        self.package = package
        self.url = url
        self.cause = cause
        super().__init__(f"failed to fetch debian archive {url} for {package}: {cause}")


class DirectoryError(BuildError):
    def __init__(self, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"failed to create directory for {path}: {cause}")


class ExtractError(BuildError):
    def __init__(self, src: Path, dst: Path, cause: Exception):
        self.src = src
        self.dst = dst
        self.cause = cause
        super().__init__(f"failed to extract {src} to {dst}: {cause}")


class GitBranchError(BuildError):
    def __init__(self, package: str, branch: str, cause: Exception):
        self.package = package
        self.branch = branch
        self.cause = cause
        super().__init__(f"failed to switch to branch {branch} on {package}: {cause}")


class GitCommitError(BuildError):
    def __init__(self, package: str, cause: Exception):
        self.package = package
        self.cause = cause
        super().__init__(f"failed to get git commit for {package}: {cause}")


class LinkError(BuildError):
    def __init__(self, src: Path, dst: Path, cause: Exception):
        self.src = src
        self.dst = dst
        self.cause = cause
        super().__init__(f"failed to link {src} to {dst}: {cause}")


class NoChangelogVersionError(BuildError):
    def __init__(self, package: str):
        self.package = package
        super().__init__(f"no version listed in changelog for {package}")


class OpenError(BuildError):
    def __init__(self, file: Path, cause: Exception):
        self.file = file
        self.cause = cause
        super().__init__(f"failed to open file at {file}: {cause}")


class PoolError(BuildError):
    def __init__(self, package: str, cause: Exception):
        self.package = package
        self.cause = cause
        super().__init__(f"failed to move {package} to pool: {cause}")


class ReadError(BuildError):
    def __init__(self, file: Path, cause: Exception):
        self.file = file
        self.cause = cause
        super().__init__(f"failed to read file at {file}: {cause}")


class RecordUpdateError(BuildError):
    def __init__(self, package: str, cause: Exception):
        self.package = package
        self.cause = cause
        super().__init__(f"failed to update record for {package}: {cause}")


class RsyncError(BuildError):
    def __init__(self, src: Path, dst: Path, cause: Exception):
        self.src = src
        self.dst = dst
        self.cause = cause
        super().__init__(f"rsyncing {src} to {dst} failed: {cause}")
