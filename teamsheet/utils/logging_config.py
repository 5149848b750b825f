"""
Logging setup for the Teamsheet application.

Modules log through ``logging.getLogger(__name__)``; this module only wires
the root handler once for the entry points.
"""
import logging
from typing import Optional, Union

from .constants import DEFAULT_LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """
    Configure root logging for command line entry points.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or numeric level.
            Falls back to DEFAULT_LOG_LEVEL when not given or unknown.
    """
    if level is None:
        level = DEFAULT_LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.getLevelName(DEFAULT_LOG_LEVEL)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
