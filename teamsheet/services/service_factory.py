"""
Service Factory for dependency injection.

Builds fixture selection services with their collaborators wired together,
so the web layer never constructs services by hand.
"""
from typing import Iterable, Optional

from ..models.formation import FormationFormat
from ..models.player import PlayerRef
from ..utils.constants import MAX_COMMAND_HISTORY
from .fixture_selection_service import FixtureSelectionService
from .selection_commands import SelectionCommandManager


class ServiceFactory:
    """
    Factory for creating service instances with proper dependency injection.
    """

    def __init__(self, max_history: int = MAX_COMMAND_HISTORY):
        """Initialize factory with default configurations."""
        self.max_history = max_history

    def create_command_manager(self) -> SelectionCommandManager:
        """Create an undo/redo manager with the configured history length."""
        return SelectionCommandManager(max_history=self.max_history)

    def create_fixture_selection_service(
        self,
        fixture_id: Optional[str] = None,
        fmt: FormationFormat = FormationFormat.SEVEN_A_SIDE,
        players: Optional[Iterable[PlayerRef]] = None,
        squad: Optional[Iterable[str]] = None
    ) -> FixtureSelectionService:
        """
        Create a FixtureSelectionService with its own command history.

        Args:
            fixture_id: Fixture the selections belong to
            fmt: Match format used for formation templates
            players: Roster for the available-players list
            squad: Initial squad member ids

        Returns:
            Configured FixtureSelectionService instance
        """
        return FixtureSelectionService(
            fixture_id=fixture_id,
            fmt=fmt,
            players=players,
            squad=squad,
            command_manager=self.create_command_manager()
        )
