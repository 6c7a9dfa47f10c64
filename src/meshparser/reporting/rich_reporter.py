from __future__ import annotations

import os
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .base import Level, Reporter, TaskRecord, TaskStatus

TRANSIENT_ENV = "MESHPARSER_PROGRESS_TRANSIENT"

_ICONS = {
    TaskStatus.SUCCESS: "[green]✔[/]",
    TaskStatus.FAILED: "[red]✖[/]",
}

_TAGS = {
    Level.INFO: "[green]INFO[/]",
    Level.WARNING: "[yellow]WARN[/]",
    Level.ERROR: "[bold red]ERROR[/]",
    Level.VERBOSE: "[cyan]VERB{vlevel}[/]",
}


class RichReporter(Reporter):
    """Live progress bar per counted task with a running outcome tally.

    With ``MESHPARSER_PROGRESS_TRANSIENT=1`` bars vanish when done and the
    completion lines are printed together on flush.
    """

    def __init__(self, console: Console | None = None):
        super().__init__()
        self.console = console or Console(
            stderr=True, highlight=False, soft_wrap=False
        )
        self._transient = os.getenv(TRANSIENT_ENV, "").lower() in (
            "1",
            "true",
            "yes",
        )
        self._progress: Progress | None = None
        self._bars: Dict[str, TaskID] = {}
        self._deferred: List[str] = []

    def _live(self) -> Progress:
        if self._progress is None:
            self._progress = Progress(
                SpinnerColumn(spinner_name="dots"),
                TextColumn("{task.description}"),
                BarColumn(bar_width=None),
                MofNCompleteColumn(),
                TextColumn("{task.fields[tally]}"),
                TextColumn("{task.fields[item]}", style="dim"),
                TimeElapsedColumn(),
                transient=self._transient,
                console=self.console,
                expand=True,
            )
            self._progress.start()
        return self._progress

    def _on_start(self, rec: TaskRecord) -> None:
        if rec.total is None:
            self.console.rule(escape(rec.name))
            return
        self._bars[rec.task_id] = self._live().add_task(
            escape(rec.name), total=rec.total, tally="", item=""
        )

    def _on_advance(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        bar = self._bars.get(rec.task_id)
        if bar is None or self._progress is None:
            return
        self._progress.update(
            bar,
            completed=rec.completed,
            tally=escape(rec.tally()),
            item=escape(str(meta.get("current_item", ""))),
        )

    def _on_end(self, rec: TaskRecord) -> None:
        count = f" {rec.progress_text}" if rec.total is not None else ""
        line = (
            f"{_ICONS.get(rec.status, '')} {escape(rec.name)}{count} "
            f"({rec.duration:.2f}s){escape(rec.stats_suffix())}"
        )
        bar = self._bars.pop(rec.task_id, None)
        if bar is not None and self._progress is not None:
            self._progress.update(bar, item="")
        if self._transient:
            self._deferred.append(line)
        else:
            self.console.print(line)
        if not self._bars:
            self.flush()

    def _message(
        self,
        level: Level,
        message: str,
        fields: Dict[str, Any],
        vlevel: int = 0,
    ) -> None:
        tag = _TAGS[level].format(vlevel=vlevel)
        self.console.print(f"{tag}: {escape(message)}")

    def flush(self) -> None:
        if self._progress is not None:
            try:
                self._progress.stop()
            finally:
                self._progress = None
        if self._deferred:
            self.console.print("\n".join(self._deferred))
            self._deferred.clear()
