"""Logging setup for infragraph."""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

VERBOSITY_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def level_for_verbosity(verbose: int) -> int:
    """Map a -v count to a level: none WARNING, -v INFO, -vv DEBUG."""
    return VERBOSITY_LEVELS[max(0, min(verbose, len(VERBOSITY_LEVELS) - 1))]


def setup_logging(level: int = logging.WARNING, format_string: Optional[str] = None) -> logging.Logger:
    """
    Configure stderr logging for the 'infragraph' logger tree.
    
    Args:
        level: Logging level (default: WARNING)
        format_string: Custom format string (optional)
    
    Returns:
        The 'infragraph' root logger
    """
    logging.basicConfig(
        level=level,
        format=format_string or DEFAULT_FORMAT,
        stream=sys.stderr,
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    
    logger = logging.getLogger("infragraph")
    logger.setLevel(level)
    # Retry attempts are already logged by the executor.
    logging.getLogger("tenacity").setLevel(max(level, logging.WARNING))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for one area, e.g. get_logger("plan.engine") -> 'infragraph.plan.engine'."""
    return logging.getLogger(f"infragraph.{name}")
