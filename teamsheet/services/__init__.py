"""
Services package for the Teamsheet team-selection engine.

This package contains the selection store, drop resolver, period partitioning,
squad gate and the fixture-level coordination built on top of them.
"""
from .errors import SelectionError, UnknownScopeError, PeriodError
from .drop_resolver import DropEvent, resolve_drop, resolve_substitute_drop, resolve_remove
from .selection_store import SelectionStore
from .period_manager import PeriodManager
from .squad_gate import SquadGate, SquadMode
from .selection_commands import SelectionCommandManager
from .lineup_validator import LineupValidationService, ValidationResult
from .persistence_service import PersistenceService
from .fixture_selection_service import FixtureSelectionService
from .service_factory import ServiceFactory

__all__ = [
    "SelectionError", "UnknownScopeError", "PeriodError",
    "DropEvent", "resolve_drop", "resolve_substitute_drop", "resolve_remove",
    "SelectionStore", "PeriodManager", "SquadGate", "SquadMode",
    "SelectionCommandManager", "LineupValidationService", "ValidationResult",
    "PersistenceService", "FixtureSelectionService", "ServiceFactory"
]
