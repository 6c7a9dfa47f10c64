from __future__ import annotations

from typing import Any, Dict

from .base import Level, Reporter


class SilentReporter(Reporter):
    """Renders nothing. Task bookkeeping still runs."""

    def _message(
        self,
        level: Level,
        message: str,
        fields: Dict[str, Any],
        vlevel: int = 0,
    ) -> None:
        pass
