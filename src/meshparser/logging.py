"""Library logging for meshparser.

Modules log through the stdlib ``meshparser`` logger, which is silent
(``NullHandler``) until an application configures it. The CLI calls
``configure_logging`` to forward records into the active reporter, so log
lines and reporter output share one stream and one format.
"""

from __future__ import annotations

import logging

from .reporting import get_reporter

LOGGER_NAME = "meshparser"

__all__ = ["LOGGER_NAME", "get_logger", "configure_logging", "step"]

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


class _ReporterHandler(logging.Handler):
    """Forward a record to the reporter method matching its level."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:
            self.handleError(record)
            return
        rep = get_reporter()
        if record.levelno >= logging.ERROR:
            rep.error(msg, logger=record.name)
        elif record.levelno >= logging.WARNING:
            rep.warning(msg, logger=record.name)
        elif record.levelno >= logging.INFO:
            rep.status(msg, logger=record.name)
        else:
            rep.verbose(msg, level=2, logger=record.name)


def configure_logging(verbosity: int = 0) -> logging.Logger:
    """Route ``meshparser`` records to the reporter.

    Per-stage decoder traces are DEBUG and only surface at ``-vv``.
    Calling this again replaces the previous handler.
    """
    logger = get_logger()
    logger.setLevel(logging.DEBUG if verbosity >= 2 else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = _ReporterHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def step(message: str) -> None:
    get_reporter().status(f"  -> {message}")
