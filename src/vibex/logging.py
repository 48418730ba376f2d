from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False
_LOG_FILES: set[str] = set()


def setup_logging(filename: str | Path | None = None) -> structlog.BoundLogger:
    """Set up structured logging for the vibex package.

    Progress and warning lines are rendered for humans and written to stderr.
    Calling again with a filename tees the same lines into that file.

    Args:
        filename: Optional path to a log file, in addition to stderr.

    Returns:
        A structlog logger instance configured for the vibex package.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if not _LOGGING_CONFIGURED:
        logging.basicConfig(
            level=logging.INFO,
            handlers=[logging.StreamHandler(sys.stderr)],
            format="%(message)s",
        )
        logging.getLogger("vibex").setLevel(logging.INFO)
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%H:%M:%S"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.dev.ConsoleRenderer(colors=False),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True

    if filename and str(filename) not in _LOG_FILES:
        logging.getLogger("vibex").addHandler(logging.FileHandler(str(filename), encoding="utf-8"))
        _LOG_FILES.add(str(filename))

    return structlog.get_logger("vibex")


logger = setup_logging()
