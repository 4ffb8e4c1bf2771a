"""Verbosity-levelled logging for datechain.

Two extra levels sit between the standard ones: CHANGES (25) reports
accepted edits and saves, CHECKS (15) reports how each activity's dates
were chosen. The CLI's ``-v`` count selects how much of this is shown.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

CHANGES_LEVEL = 25
CHECKS_LEVEL = 15

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0
VERBOSITY_CHANGES = 1
VERBOSITY_CHECKS = 2
VERBOSITY_DEBUG = 3

_VERBOSITY_LEVELS = {
    VERBOSITY_SILENT: logging.ERROR,
    VERBOSITY_CHANGES: CHANGES_LEVEL,
    VERBOSITY_CHECKS: CHECKS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}


class PlannerLogger(logging.Logger):
    """Logger with ``changes()`` and ``checks()`` alongside the standard methods."""

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Report an accepted edit, a save, or a moved activity."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Report a scheduling decision for a single activity."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> PlannerLogger:
    """Return the shared "datechain" logger."""
    logging.setLoggerClass(PlannerLogger)
    logger = logging.getLogger("datechain")
    assert isinstance(logger, PlannerLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Send datechain log output for ``verbosity`` to ``stream`` (stderr by default).

    Unknown verbosity values behave like VERBOSITY_SILENT. Calling this again
    replaces the previous handler.
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_VERBOSITY_LEVELS.get(verbosity, logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to errors-only, e.g. between tests."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)
