"""Wall-clock timing of the stages of a package build."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator


def format_duration(seconds: float) -> str:
    """Format seconds as human-readable duration.

    Examples:
        0.5 -> "0.5s"
        65.3 -> "1m 5.3s"
        3661.0 -> "1h 1m 1.0s"
    """
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes = int(seconds // 60)
    remaining = seconds % 60

    if minutes < 60:
        return f"{minutes}m {remaining:.1f}s"

    hours = minutes // 60
    minutes = minutes % 60
    return f"{hours}h {minutes}m {remaining:.1f}s"


class StageTimer:
    """Records how long each stage of one package build took.

    Usage:
        timer = StageTimer("foo")
        with timer.stage("extract"):
            extract(...)
        log.debug(timer.summary())
    """

    def __init__(self, package: str) -> None:
        self.package = package
        self.timings: dict[str, float] = {}

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        start = time.monotonic()
        try:
            yield
        finally:
            # Failed stages are recorded too, so a summary shows where time went
            self.timings[name] = round(time.monotonic() - start, 3)

    @property
    def total(self) -> float:
        return sum(self.timings.values())

    def summary(self) -> str:
        """One line, e.g. ``foo: workspace 0.0s | sbuild 5m 12.4s | total 5m 12.4s``."""
        if not self.timings:
            return f"{self.package}: (no timing data)"

        parts = [f"{k} {format_duration(v)}" for k, v in self.timings.items()]
        parts.append(f"total {format_duration(self.total)}")
        return f"{self.package}: " + " | ".join(parts)
