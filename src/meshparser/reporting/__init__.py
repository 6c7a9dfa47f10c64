"""Console reporting back-ends: plain, rich, JSON Lines and silent."""

from __future__ import annotations

from typing import TextIO

from .base import (
    Level,
    Reporter,
    TaskRecord,
    TaskStatus,
    get_reporter,
    get_verbosity,
    set_reporter,
    set_verbosity,
    task,
)
from .jsonl import JsonLinesReporter
from .plain import PlainReporter
from .rich_reporter import RichReporter
from .silent import SilentReporter

__all__ = [
    "Level",
    "Reporter",
    "TaskRecord",
    "TaskStatus",
    "get_reporter",
    "get_verbosity",
    "set_reporter",
    "set_verbosity",
    "task",
    "JsonLinesReporter",
    "PlainReporter",
    "RichReporter",
    "SilentReporter",
    "BACKENDS",
    "make_reporter",
]

BACKENDS = ("plain", "rich", "json", "silent")


def make_reporter(
    name: str, *, interactive: bool = True, events: TextIO | None = None
) -> Reporter:
    """Build a reporter by CLI name; ``rich`` falls back to plain off a TTY.

    ``events`` redirects the JSON Lines stream (stdout by default).
    """
    if name not in BACKENDS:
        raise ValueError(f"Unknown reporter backend: {name}")
    if name == "json":
        return JsonLinesReporter(stream=events)
    if name == "silent":
        return SilentReporter()
    if name == "rich" and interactive:
        return RichReporter()
    return PlainReporter()
