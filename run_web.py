#!/usr/bin/env python3
"""
Main entry point for the Teamsheet web application.

This script launches the Flask-based API server. Host, port and log level
can be overridden with TEAMSHEET_HOST, TEAMSHEET_PORT and TEAMSHEET_LOG_LEVEL.
"""
import os

from teamsheet.ui.web_app import run_web_app
from teamsheet.utils import configure_logging
from teamsheet.utils.constants import DEFAULT_HOST, DEFAULT_PORT

if __name__ == "__main__":
    configure_logging(os.environ.get("TEAMSHEET_LOG_LEVEL"))
    run_web_app(
        host=os.environ.get("TEAMSHEET_HOST", DEFAULT_HOST),
        port=int(os.environ.get("TEAMSHEET_PORT", DEFAULT_PORT)),
    )
