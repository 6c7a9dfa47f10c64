from __future__ import annotations

import sys
from typing import Any, Dict, TextIO

from .base import Level, Reporter, TaskRecord, TaskStatus, get_verbosity

_ICONS = {
    TaskStatus.SUCCESS: "✔",
    TaskStatus.FAILED: "✖",
}

# level -> (ANSI color, tag)
_TAGS = {
    Level.INFO: ("32", "INFO"),
    Level.WARNING: ("33", "WARN"),
    Level.ERROR: ("31", "ERROR"),
    Level.VERBOSE: ("36", "VERB"),
}


class PlainReporter(Reporter):
    """One line per event on stderr; ANSI color only on a terminal."""

    def __init__(
        self, stream: TextIO | None = None, use_color: bool | None = None
    ):
        super().__init__()
        self.stream = stream or sys.stderr
        if use_color is None:
            isatty = getattr(self.stream, "isatty", None)
            use_color = bool(isatty and isatty())
        self.use_color = use_color

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")

    def _paint(self, code: str, text: str) -> str:
        return f"\x1b[{code}m{text}\x1b[0m" if self.use_color else text

    def _on_advance(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        if get_verbosity() < 1:
            return
        item = meta.get("current_item") or f"#{rec.completed}"
        outcome = meta.get("outcome")
        tail = f" {outcome}" if outcome else ""
        self._write(f"   · {rec.name}: {item}{tail} ({rec.progress_text})")

    def _on_end(self, rec: TaskRecord) -> None:
        icon = _ICONS.get(rec.status, "?")
        count = f" {rec.progress_text}" if rec.total is not None else ""
        self._write(
            f" {icon} {rec.name}{count} ({rec.duration:.2f}s)"
            f"{rec.stats_suffix()}"
        )

    def _message(
        self,
        level: Level,
        message: str,
        fields: Dict[str, Any],
        vlevel: int = 0,
    ) -> None:
        code, tag = _TAGS[level]
        if vlevel:
            tag = f"{tag}{vlevel}"
        self._write(f"{self._paint(code, tag)}: {message}")
