"""
Parallel downloads of source archives and prebuilt packages.

A file that already exists locally is kept when its size matches the
Content-Length the server reports for it. That is a weak check, but artifact
URLs are expected to be immutable.
"""

from __future__ import annotations

import hashlib
import http.client
import os
import shutil
import urllib.error
import urllib.request
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from debrep.build.config import ArchiveLocation, Config, DebianArchive
from debrep.core.utils import ASSETS_CACHE, POOL_COMPONENT, POOL_DIR, log, pool_prefix

# Per-socket-operation timeout; a download as a whole is not bounded
HTTP_TIMEOUT = 60
CHUNK_SIZE = 64 * 1024


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class FetchItem:
    """One file to download."""

    name: str
    url: str
    destination: Path
    checksum: Optional[str] = None


class FetchStatus(str, Enum):
    DOWNLOADED = "downloaded"
    ALREADY_EXISTS = "already-exists"


@dataclass(frozen=True)
class FetchResult:
    item: FetchItem
    status: FetchStatus
    size: int = 0


class DownloadError(Exception):
    """A single download failed; other downloads are unaffected."""

    def __init__(self, item: FetchItem, cause: object):
        self.item = item
        self.cause = cause
        super().__init__(f"unable to download '{item.name}': {cause}")


FetchOutcome = Union[FetchResult, DownloadError]


# =============================================================================
# Helpers
# =============================================================================


def sha256_of_file(path: Path) -> str:
    hasher = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def normalize_checksum(checksum: str) -> str:
    """Accept ``<hex>`` or ``sha256:<hex>``."""
    checksum = checksum.strip().lower()
    if checksum.startswith("sha256:"):
        checksum = checksum[len("sha256:"):]
    return checksum


def remote_length(url: str) -> int:
    """Content-Length reported for ``url``, 0 if the server does not say."""
    request = urllib.request.Request(url, method="HEAD")
    with urllib.request.urlopen(request, timeout=HTTP_TIMEOUT) as response:
        length = response.headers.get("Content-Length")
    try:
        return int(length) if length is not None else 0
    except ValueError:
        return 0


# =============================================================================
# Download
# =============================================================================


def download(item: FetchItem) -> FetchResult:
    """Download one item unless an identical-looking copy is already present.

    Raises:
        urllib.error.URLError: On network failures.
        http.client.HTTPException: If the response breaks off mid-stream.
        OSError: If the destination cannot be written.
        ValueError: If the downloaded file does not match its checksum.
    """
    destination = item.destination

    if destination.exists():
        if remote_length(item.url) == destination.stat().st_size:
            return FetchResult(item, FetchStatus.ALREADY_EXISTS, destination.stat().st_size)

    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(destination.name + ".part")
    try:
        with urllib.request.urlopen(item.url, timeout=HTTP_TIMEOUT) as response:
            with open(partial, "wb") as out:
                shutil.copyfileobj(response, out, CHUNK_SIZE)
    except (OSError, http.client.HTTPException):
        partial.unlink(missing_ok=True)
        raise

    if item.checksum:
        actual = sha256_of_file(partial)
        if actual != normalize_checksum(item.checksum):
            partial.unlink()
            raise ValueError(f"checksum mismatch: expected {normalize_checksum(item.checksum)}, got {actual}")

    os.replace(partial, destination)
    return FetchResult(item, FetchStatus.DOWNLOADED, destination.stat().st_size)


def _fetch_one(item: FetchItem) -> FetchOutcome:
    log.info(f"- {item.name}")
    try:
        return download(item)
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
        return DownloadError(item, e)


def fetch_all(items: list[FetchItem], workers: Optional[int] = None) -> list[FetchOutcome]:
    """Download ``items`` in parallel; one outcome per item, in input order."""
    if not items:
        return []
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_fetch_one, items))


# =============================================================================
# Planning
# =============================================================================


def plan_downloads(config: Config, workdir: Path) -> list[FetchItem]:
    """Everything the configuration needs fetched before building."""
    items: list[FetchItem] = []
    cache = workdir / ASSETS_CACHE

    for source in config.sources:
        if isinstance(source.location, ArchiveLocation):
            items.append(FetchItem(
                name=source.name,
                url=source.location.url,
                destination=cache / f"{source.name}_{source.location.file_name}",
                checksum=source.location.checksum,
            ))
        if isinstance(source.debian, DebianArchive):
            items.append(debian_archive_item(source.name, source.debian, cache))

    pool = workdir / POOL_DIR / config.archive / POOL_COMPONENT / "binary"
    for direct in config.direct:
        items.append(FetchItem(
            name=direct.name,
            url=direct.url,
            destination=pool / pool_prefix(direct.name) / direct.name / direct.file_name,
            checksum=direct.checksum,
        ))

    return items


def debian_archive_item(package: str, origin: DebianArchive, cache: Path) -> FetchItem:
    return FetchItem(
        name=f"{package} (debian)",
        url=origin.url,
        destination=cache / f"{package}_debian_{origin.file_name}",
        checksum=origin.checksum,
    )
