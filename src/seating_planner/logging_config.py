"""Log output for planner runs."""
from __future__ import annotations

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """Send ``seating_planner.*`` records to stderr and, optionally, ``log_file``.

    Safe to call again; earlier handlers are replaced.
    """
    logger = logging.getLogger("seating_planner")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.handlers.clear()

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
