"""
CPU4 Emulator - Logging Setup

Console output goes through rich's RichHandler; an optional log file gets
everything at DEBUG in the pipe-separated format. Library modules only
create loggers; handlers are installed here, by the CLI.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.logging import RichHandler

from .config import LOG_DATEFMT, LOG_FORMAT, LOGGER_NAME


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Optional[Union[str, Path]] = None,
    name: str = LOGGER_NAME,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Repeated calls replace the previous handlers, so the CLI can be
    invoked several times in one process (tests do this).
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG if log_file else console_level)

    # ── Console handler ──
    ch = RichHandler(
        level=console_level,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(ch)

    # ── File handler: captures everything (DEBUG+) ──
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        logger.addHandler(fh)
        logger.info("Log file: %s", log_path)

    return logger
