"""
Teamsheet: formation and team-selection consistency engine.

Keeps per-period lineups consistent while a coach picks a squad and drags
players between pitch slots and the bench.
"""

__version__ = "1.0.0"
