"""
Constants for the Teamsheet team-selection engine.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Teamsheet"

# Web server defaults (overridable through the environment in run_web.py)
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7122
DEFAULT_LOG_LEVEL = "INFO"

# Period defaults
DEFAULT_PERIOD_DURATION_MIN = 45
# Period ids are grouped into halves: id // PERIOD_HALF_BASE is the half number
PERIOD_HALF_BASE = 100
DEFAULT_PERIODS = [
    (100, "First Half", DEFAULT_PERIOD_DURATION_MIN),
    (200, "Second Half", DEFAULT_PERIOD_DURATION_MIN),
]

# Selection conventions
UNASSIGNED_PLAYER_ID = "unassigned"
SUBSTITUTE_LABEL = "SUB"
SUBSTITUTE_SLOT_PREFIX = "sub-"

DEFAULT_PERFORMANCE_CATEGORY = "MESSI"

# Undo history length for selection edits
MAX_COMMAND_HISTORY = 50
