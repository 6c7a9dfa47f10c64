"""JSON Lines reporter: one event object per line, for scripts and CI.

Status lines of the form ``"<Kind> summary: key=value ..."`` additionally
produce a ``summary`` event with the pairs lifted into fields (values stay
strings).
"""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, TextIO

from .base import Level, Reporter, TaskRecord

_SUMMARY_TYPES = {
    "mesh summary": "mesh",
    "validate summary": "validate",
    "bench summary": "bench",
}


def _pairs(text: str) -> Dict[str, str]:
    return dict(tok.split("=", 1) for tok in text.split() if "=" in tok)


class JsonLinesReporter(Reporter):
    def __init__(self, stream: TextIO | None = None):
        super().__init__()
        self.stream = stream or sys.stdout

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        record = {**payload, "event": event}
        self.stream.write(
            json.dumps(record, sort_keys=True, default=str) + "\n"
        )

    def _on_start(self, rec: TaskRecord) -> None:
        self._emit(
            "task_start",
            {
                "id": rec.task_id,
                "name": rec.name,
                "total": rec.total,
                **rec.meta,
            },
        )

    def _on_advance(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        self._emit(
            "task_progress",
            {"id": rec.task_id, "completed": rec.completed, **meta},
        )

    def _on_end(self, rec: TaskRecord) -> None:
        self._emit(
            "task_end",
            {
                "id": rec.task_id,
                "status": rec.status.value,
                "completed": rec.completed,
                "total": rec.total,
                "duration_seconds": rec.duration,
                "outcomes": dict(rec.outcomes),
                **rec.meta,
            },
        )

    def _summary(self, message: str, fields: Dict[str, Any]) -> None:
        head, sep, rest = message.partition(":")
        kind = _SUMMARY_TYPES.get(head.strip().lower())
        if not sep or kind is None:
            return
        self._emit(
            "summary",
            {"summary_type": kind, "raw": message, **_pairs(rest), **fields},
        )

    def _message(
        self,
        level: Level,
        message: str,
        fields: Dict[str, Any],
        vlevel: int = 0,
    ) -> None:
        if level is Level.INFO:
            self._summary(message, fields)
        payload = {"message": message, "level": level.value, **fields}
        if vlevel:
            payload["vlevel"] = vlevel
        self._emit("status", payload)
