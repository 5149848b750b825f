"""
UI package for the Teamsheet team-selection engine.

This package contains the Flask web interface.
"""
from .web_app import create_app, run_web_app, WebAppState

__all__ = ["create_app", "run_web_app", "WebAppState"]
