"""
Utilities package for the Teamsheet team-selection engine.

This package contains constants and logging helpers used throughout the application.
"""
from .constants import (
    APP_TITLE, DEFAULT_PERIOD_DURATION_MIN, PERIOD_HALF_BASE, DEFAULT_PERIODS,
    UNASSIGNED_PLAYER_ID, SUBSTITUTE_LABEL, SUBSTITUTE_SLOT_PREFIX,
    DEFAULT_PERFORMANCE_CATEGORY
)
from .logging_config import configure_logging

__all__ = [
    "APP_TITLE", "DEFAULT_PERIOD_DURATION_MIN", "PERIOD_HALF_BASE",
    "DEFAULT_PERIODS", "UNASSIGNED_PLAYER_ID", "SUBSTITUTE_LABEL",
    "SUBSTITUTE_SLOT_PREFIX", "DEFAULT_PERFORMANCE_CATEGORY", "configure_logging"
]
