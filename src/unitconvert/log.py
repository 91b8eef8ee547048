# -----------------------------------------------------------------------------
# Logging: shared logger setup for the converter, CLI and API
# Purpose:
#   One "unitconvert" logger with a stderr handler, plus a TRACE level below
#   DEBUG for token and AST dumps.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging

DEFAULT_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
LOGGER_NAME = "unitconvert"

# Finer than DEBUG; used for per-token dumps
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.WARNING)
    return logger


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Attach the package handler and set the level for every unitconvert.* logger."""
    logger = get_logger()
    numeric = TRACE if level.upper() == "TRACE" else logging.getLevelName(level.upper())
    logger.setLevel(numeric if isinstance(numeric, int) else logging.WARNING)
    return logger


__all__ = ["get_logger", "configure_logging", "TRACE"]
