"""Logging for the Premium Submission Helper.

All modules log below the ``premiumhelper`` logger; plugins get
``premiumhelper.plugins.<name>`` through their API. Handlers are attached
once, by ``setup_logging()``, from the app lifespan or a CLI command.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# httpx logs every request line at INFO
NOISY_LOGGERS = ("httpx", "httpcore")

logger = logging.getLogger("premiumhelper")


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Attach console and optional file handlers to the package logger.

    Calling it again replaces the previous handlers.

    Args:
        log_level: Level name; unknown names fall back to INFO.
        log_file: Optional file that receives the same records.
        log_format: ``logging.Formatter`` format string.

    Returns:
        The ``premiumhelper`` logger.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(_handler(logging.StreamHandler(sys.stderr), level, log_format))

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), level, log_format)
        )

    logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger, e.g. ``get_logger("cli")`` -> ``premiumhelper.cli``."""
    return logging.getLogger(f"premiumhelper.{name}")


hooks_logger = get_logger("hooks")
plugins_logger = get_logger("plugins")
directory_logger = get_logger("directory")
analysis_logger = get_logger("analysis")
