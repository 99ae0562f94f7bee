"""
Build configuration for debrep.

Dataclasses describing the packages to build, and the loader for sources.toml.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from debrep.core.errors import ConditionalRuleError, ConfigError
from debrep.core.utils import CONFIG_FILE

__all__ = [
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
]


# =============================================================================
# Data Classes
# =============================================================================


class BuildOn(str, Enum):
    """Incremental-build strategy of a source."""

    ALWAYS = "always"
    CHANGELOG = "changelog"
    COMMIT = "commit"

    @classmethod
    def parse(cls, rule: Optional[str]) -> "BuildOn":
        """Map a ``build_on`` tag to a strategy; ``None`` means always build."""
        if rule is None:
            return cls.ALWAYS
        if rule == cls.CHANGELOG.value:
            return cls.CHANGELOG
        if rule == cls.COMMIT.value:
            return cls.COMMIT
        raise ConditionalRuleError(rule)


@dataclass(frozen=True)
class Asset:
    """A glob under the shared assets root, linked into ``dst`` of the workspace."""

    src: str
    dst: str


@dataclass(frozen=True)
class ArchiveLocation:
    """Source tarball fetched into the asset cache before building."""

    url: str
    checksum: Optional[str] = None

    @property
    def file_name(self) -> str:
        return self.url[self.url.rfind("/") + 1:]


@dataclass(frozen=True)
class GitLocation:
    """Source repository cloned straight into the workspace."""

    url: str
    branch: Optional[str] = None


@dataclass(frozen=True)
class DebianArchive:
    """Control metadata shipped as a separate, checksummed archive."""

    url: str
    checksum: str

    @property
    def file_name(self) -> str:
        return self.url[self.url.rfind("/") + 1:]


@dataclass(frozen=True)
class DebianBranch:
    """Control metadata taken from a branch of another repository."""

    url: str
    branch: str


SourceLocation = Union[ArchiveLocation, GitLocation]
DebianOrigin = Union[DebianArchive, DebianBranch]


@dataclass
class Source:
    """A package built from source."""

    name: str
    location: Optional[SourceLocation] = None
    debian: Optional[DebianOrigin] = None
    assets: list[Asset] = field(default_factory=list)
    prebuild: list[str] = field(default_factory=list)
    starting_build: list[str] = field(default_factory=list)
    depends: list[str] = field(default_factory=list)
    build_on: Optional[str] = None
    keep_source: bool = True

    def cached_archive(self, cache_dir: Path) -> Optional[Path]:
        """Where the fetched source archive of this package lives, if any."""
        if not isinstance(self.location, ArchiveLocation):
            return None
        return cache_dir / f"{self.name}_{self.location.file_name}"


@dataclass
class Direct:
    """A prebuilt package downloaded straight into the pool."""

    name: str
    url: str
    checksum: Optional[str] = None

    @property
    def file_name(self) -> str:
        return self.url[self.url.rfind("/") + 1:]


@dataclass
class Config:
    """Contents of sources.toml."""

    archive: str
    sources: list[Source] = field(default_factory=list)
    direct: list[Direct] = field(default_factory=list)
    path: Optional[Path] = None

    def find(self, name: str) -> Optional[Source]:
        for source in self.sources:
            if source.name == name:
                return source
        return None


# =============================================================================
# Loading
# =============================================================================


def _expect(value: Any, kind: type, path: Path, key: str) -> Any:
    if not isinstance(value, kind):
        raise ConfigError(path, f"'{key}' must be a {kind.__name__}")
    return value


def _string_list(table: dict[str, Any], key: str, path: Path, where: str) -> list[str]:
    values = table.get(key, [])
    _expect(values, list, path, f"{where}.{key}")
    for value in values:
        _expect(value, str, path, f"{where}.{key}")
    return list(values)


def _parse_location(value: Any, path: Path, where: str) -> Optional[SourceLocation]:
    if value is None:
        return None
    _expect(value, dict, path, f"{where}.location")
    if "url" in value:
        return ArchiveLocation(url=value["url"], checksum=value.get("checksum"))
    if "git" in value:
        return GitLocation(url=value["git"], branch=value.get("branch"))
    raise ConfigError(path, f"'{where}.location' needs either 'url' or 'git'")


def _parse_debian(value: Any, path: Path, where: str) -> Optional[DebianOrigin]:
    if value is None:
        return None
    _expect(value, dict, path, f"{where}.debian")
    url = value.get("url")
    if not isinstance(url, str):
        raise ConfigError(path, f"'{where}.debian' needs a 'url'")
    if "branch" in value:
        return DebianBranch(url=url, branch=value["branch"])
    if "checksum" in value:
        return DebianArchive(url=url, checksum=value["checksum"])
    raise ConfigError(path, f"'{where}.debian' needs either 'branch' or 'checksum'")


def _parse_source(table: Any, path: Path, index: int) -> Source:
    where = f"source[{index}]"
    _expect(table, dict, path, where)
    name = table.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigError(path, f"'{where}.name' is required")
    where = f"source.{name}"

    assets = []
    for asset in _expect(table.get("assets", []), list, path, f"{where}.assets"):
        _expect(asset, dict, path, f"{where}.assets")
        if not isinstance(asset.get("src"), str) or not isinstance(asset.get("dst"), str):
            raise ConfigError(path, f"'{where}.assets' entries need 'src' and 'dst'")
        if not asset["src"] or Path(asset["src"]).is_absolute():
            raise ConfigError(path, f"'{where}.assets' src must be a relative pattern, got {asset['src']!r}")
        assets.append(Asset(src=asset["src"], dst=asset["dst"]))

    build_on = table.get("build_on")
    if build_on is not None:
        _expect(build_on, str, path, f"{where}.build_on")

    return Source(
        name=name,
        location=_parse_location(table.get("location"), path, where),
        debian=_parse_debian(table.get("debian"), path, where),
        assets=assets,
        prebuild=_string_list(table, "prebuild", path, where),
        starting_build=_string_list(table, "starting_build", path, where),
        depends=_string_list(table, "depends", path, where),
        build_on=build_on,
        keep_source=bool(table.get("keep_source", True)),
    )


def _parse_direct(table: Any, path: Path, index: int) -> Direct:
    where = f"direct[{index}]"
    _expect(table, dict, path, where)
    if not isinstance(table.get("name"), str) or not isinstance(table.get("url"), str):
        raise ConfigError(path, f"'{where}' needs 'name' and 'url'")
    return Direct(name=table["name"], url=table["url"], checksum=table.get("checksum"))


def load_config(path: Optional[Path] = None) -> Config:
    """Load sources.toml (default: the one in the current directory).

    Raises:
        ConfigError: If the file is missing, not valid TOML, or malformed.
    """
    path = Path(path) if path is not None else Path.cwd() / CONFIG_FILE

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(path, "file not found") from None
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(path, str(e)) from e

    archive = data.get("archive")
    if not isinstance(archive, str) or not archive:
        raise ConfigError(path, "'archive' is required")

    sources = [
        _parse_source(table, path, i)
        for i, table in enumerate(_expect(data.get("source", []), list, path, "source"))
    ]
    direct = [
        _parse_direct(table, path, i)
        for i, table in enumerate(_expect(data.get("direct", []), list, path, "direct"))
    ]

    seen: set[str] = set()
    for source in sources:
        if source.name in seen:
            raise ConfigError(path, f"duplicate source '{source.name}'")
        seen.add(source.name)

    return Config(archive=archive, sources=sources, direct=direct, path=path)
