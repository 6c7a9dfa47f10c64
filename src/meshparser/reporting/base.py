"""Reporter base class and the process-wide active reporter.

Commands talk to exactly one reporter. The base class owns task
bookkeeping (completed counts, per-outcome tallies, timing); back-ends only
render what it hands them through the ``_on_*`` hooks and ``_message``.
"""

from __future__ import annotations

import sys
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "TaskStatus",
    "Level",
    "TaskRecord",
    "Reporter",
    "STAT_KEYS",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "task",
]


class TaskStatus(Enum):
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class Level(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    VERBOSE = "verbose"


# Final task meta echoed in completion lines, in this order.
STAT_KEYS = (
    "files",
    "ok",
    "not_mesh",
    "corrupt",
    "unreadable",
    "vertices",
    "bytes",
)


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    started: float = field(default_factory=time.perf_counter)
    finished: Optional[float] = None
    outcomes: Counter = field(default_factory=Counter)
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        if self.finished is None:
            return time.perf_counter() - self.started
        return self.finished - self.started

    @property
    def progress_text(self) -> str:
        if self.total is None:
            return str(self.completed)
        return f"{self.completed}/{self.total}"

    def tally(self) -> str:
        return " ".join(f"{k}={v}" for k, v in sorted(self.outcomes.items()))

    def stats_suffix(self) -> str:
        stats = " ".join(
            f"{k}={self.meta[k]}" for k in STAT_KEYS if k in self.meta
        )
        stats = stats or self.tally()
        return f" [{stats}]" if stats else ""


_VERBOSITY = 0


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    def __init__(self) -> None:
        self._tasks: Dict[str, TaskRecord] = {}

    # Tasks ---------------------------------------------------------------
    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        rec = TaskRecord(task_id, name, total, meta=dict(meta))
        self._tasks[task_id] = rec
        self._on_start(rec)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        """Count ``step`` finished items; ``outcome=`` feeds the tally."""
        rec = self._tasks.get(task_id)
        if rec is None:
            return
        rec.completed += step
        outcome = meta.get("outcome")
        if outcome:
            rec.outcomes[outcome] += step
        self._on_advance(rec, meta)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._tasks.pop(task_id, None)
        if rec is None:
            return
        rec.status = status
        rec.finished = time.perf_counter()
        rec.meta.update(final_meta)
        self._on_end(rec)

    # Messages ------------------------------------------------------------
    def status(self, message: str, **fields: Any) -> None:
        self._message(Level.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._message(Level.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._message(Level.ERROR, message, fields)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._message(Level.VERBOSE, message, fields, vlevel=level)

    def flush(self) -> None:
        pass

    # Back-end hooks ------------------------------------------------------
    def _on_start(self, rec: TaskRecord) -> None:
        pass

    def _on_advance(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        pass

    def _on_end(self, rec: TaskRecord) -> None:
        pass

    def _message(
        self,
        level: Level,
        message: str,
        fields: Dict[str, Any],
        vlevel: int = 0,
    ) -> None:
        raise NotImplementedError


_ACTIVE: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE
    _ACTIVE = rep


def get_reporter() -> Reporter:
    global _ACTIVE
    if _ACTIVE is None:
        from .plain import PlainReporter  # cycle

        _ACTIVE = PlainReporter(stream=sys.stderr)
    return _ACTIVE


@contextmanager
def task(
    task_id: str, name: str, total: int | None = None, **meta: Any
) -> Iterator[Reporter]:
    """Bracket a unit of work; the task ends FAILED if the body raises."""
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    try:
        yield rep
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED)
        raise
    rep.end_task(task_id, TaskStatus.SUCCESS)
