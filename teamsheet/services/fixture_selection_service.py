"""
Fixture-level team selection service.

Coordinates the squad gate, the per-period selection stores, performance
categories, captains and undo history for one fixture. It receives every
store's change notification, tracks which scopes have unsaved edits and
builds the document that gets persisted on save.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..models.formation import ALL_TEMPLATE_NAME, FormationFormat, FormationTemplate, FormationTemplates
from ..models.period import Period, PerformanceCategory
from ..models.player import PlayerRef
from ..models.selection import assigned_player_ids
from .drop_resolver import DropEvent
from .errors import SelectionError
from .lineup_validator import LineupValidationService, ValidationResult
from .period_manager import PeriodManager
from .persistence_service import PersistenceService, category_key
from .selection_commands import (
    DropPlayerCommand, RemovePlayerCommand, ReplaceSelectionsCommand,
    SelectionCommandManager, SubstituteDropCommand
)
from .selection_store import SelectionStore
from .squad_gate import SquadGate, SquadMode

logger = logging.getLogger(__name__)

SelectionListener = Callable[[str, int, Dict[str, Dict[str, Any]]], None]


class FixtureSelectionService:
    """
    Team selection state for one fixture.

    Position edits go through the command manager so they can be undone,
    and are ignored while the squad is still being picked.
    """

    def __init__(self, fixture_id: Optional[str] = None,
                 fmt: FormationFormat = FormationFormat.SEVEN_A_SIDE,
                 players: Optional[Iterable[PlayerRef]] = None,
                 squad: Optional[Iterable[str]] = None,
                 command_manager: Optional[SelectionCommandManager] = None):
        self.fixture_id = fixture_id
        self.format = fmt
        self.players: List[PlayerRef] = list(players or [])
        self.squad_gate = SquadGate(squad)
        self.period_manager = PeriodManager(on_selection_change=self._handle_selection_change)
        self.command_manager = command_manager or SelectionCommandManager()

        self.performance_categories: Dict[str, str] = {}
        self.captains: Dict[str, str] = {}
        self.team_templates: Dict[str, str] = {}
        self._dirty: Set[Tuple[str, int]] = set()
        self._listeners: List[SelectionListener] = []

    # ---------- Change notification ---------- #

    def add_selection_listener(self, listener: SelectionListener) -> None:
        """Register a callback receiving (team_id, period_id, selections)."""
        self._listeners.append(listener)

    def _handle_selection_change(self, team_id: str, period_id: int,
                                 selections: Dict[str, Dict[str, Any]]) -> None:
        self._dirty.add((team_id, period_id))
        logger.debug("Team %s period %s now has %d assignments", team_id, period_id, len(selections))
        for listener in self._listeners:
            listener(team_id, period_id, selections)

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self._dirty)

    def unsaved_scopes(self) -> List[Tuple[str, int]]:
        """(team_id, period_id) pairs changed since the last save or load."""
        return sorted(self._dirty)

    def mark_saved(self) -> None:
        self._dirty.clear()

    def get_selections(self, team_id: str, period_id: int) -> Dict[str, Dict[str, Any]]:
        """Serialized map of one scope."""
        return self.period_manager.get_store(team_id, period_id).to_dict()

    def get_selected_players(self) -> Set[str]:
        """Every player placed in any period of any team."""
        return assigned_player_ids(store.snapshot() for _, _, store in self.period_manager.iter_stores())

    # ---------- Roster & squad ---------- #

    def set_players(self, players: Iterable[PlayerRef]) -> None:
        self.players = list(players)

    def add_player_to_squad(self, player_id: str) -> bool:
        return self.squad_gate.add_player_to_squad(player_id)

    def remove_player_from_squad(self, player_id: str) -> bool:
        return self.squad_gate.remove_player_from_squad(player_id)

    def set_mode(self, mode: SquadMode) -> bool:
        return self.squad_gate.set_mode(mode)

    def get_available_players(self, team_id: Optional[str] = None,
                              period_id: Optional[int] = None) -> List[PlayerRef]:
        """
        Squad players not yet placed.

        With a team and period, only that lineup counts as "placed"; with a
        team only, any of its periods; with neither, the whole fixture.
        """
        if team_id is not None and period_id is not None:
            maps = [self.period_manager.get_store(team_id, period_id).snapshot()]
        else:
            maps = [store.snapshot() for _, _, store in self.period_manager.iter_stores(team_id)]
        return self.squad_gate.get_available_squad_players(self.players, maps)

    # ---------- Teams & periods ---------- #

    def ensure_team(self, team_id: str) -> List[Period]:
        """Give a team its default halves if it has no periods yet."""
        periods = self.period_manager.initialize_default_periods(team_id)
        for period in periods:
            key = category_key(period.period_id, team_id)
            self.performance_categories.setdefault(key, PerformanceCategory.default().value)
            self.period_manager.get_store(team_id, period.period_id).performance_category = \
                self.performance_categories[key]
        return periods

    def add_period(self, team_id: str, name: str, duration: int,
                   half: Optional[int] = None, copy_selections: bool = False) -> Period:
        """
        Add a period, carrying the previous period's performance category.

        Args:
            copy_selections: Start the new lineup as a copy of the previous
                period's lineup instead of empty
        """
        period = self.period_manager.add_period(team_id, name, duration, half=half)
        previous = self.period_manager.previous_period(team_id, period.period_id)

        category = PerformanceCategory.default().value
        if previous is not None:
            category = self.performance_categories.get(
                category_key(previous.period_id, team_id), category
            )
        self.performance_categories[category_key(period.period_id, team_id)] = category

        store = self.period_manager.get_store(team_id, period.period_id)
        store.performance_category = category
        if copy_selections and previous is not None:
            previous_store = self.period_manager.get_store(team_id, previous.period_id)
            store.replace_all(previous_store.snapshot())
        return period

    def edit_period(self, team_id: str, period_id: int, **updates: Any) -> Optional[Period]:
        return self.period_manager.edit_period(team_id, period_id, **updates)

    def delete_period(self, team_id: str, period_id: int) -> bool:
        """Remove a period together with its category, cached map and undo entries."""
        try:
            store = self.period_manager.get_store(team_id, period_id)
        except SelectionError:
            return False

        self.period_manager.delete_period(team_id, period_id)
        self.performance_categories.pop(category_key(period_id, team_id), None)
        self._dirty.discard((team_id, period_id))
        self.command_manager.forget_store(store)
        return True

    def set_performance_category(self, team_id: str, period_id: int, category: str) -> None:
        """
        Tag a period with a performance category and retag its lineup.

        Raises:
            SelectionError: If the category is unknown
        """
        try:
            value = PerformanceCategory(category).value
        except ValueError:
            raise SelectionError(f"Unknown performance category: {category}")

        store = self.period_manager.get_store(team_id, period_id)
        self.performance_categories[category_key(period_id, team_id)] = value
        store.set_performance_category(value)

    def set_captain(self, team_id: str, player_id: Optional[str]) -> None:
        if player_id:
            self.captains[team_id] = player_id
        else:
            self.captains.pop(team_id, None)

    def set_team_template(self, team_id: str, template_name: str) -> FormationTemplate:
        template = FormationTemplates.get_template(self.format, template_name)
        self.team_templates[team_id] = template.name
        return template

    def get_team_template(self, team_id: str) -> FormationTemplate:
        return FormationTemplates.get_template(
            self.format, self.team_templates.get(team_id, ALL_TEMPLATE_NAME)
        )

    # ---------- Position edits ---------- #

    def _position_edits_allowed(self) -> bool:
        if self.squad_gate.mode is SquadMode.PICKING_SQUAD:
            logger.debug("Position edit ignored while picking the squad")
            return False
        return True

    def _store(self, team_id: str, period_id: int) -> SelectionStore:
        return self.period_manager.get_store(team_id, period_id)

    def select_player(self, team_id: str, period_id: int, player_id: Optional[str]) -> Optional[str]:
        return self._store(team_id, period_id).select_player(player_id)

    def start_drag(self, team_id: str, period_id: int, player_id: str) -> None:
        self._store(team_id, period_id).start_drag(player_id)

    def end_drag(self, team_id: str, period_id: int) -> None:
        self._store(team_id, period_id).end_drag()

    def drop(self, team_id: str, period_id: int, event: DropEvent) -> bool:
        """Place a player; returns True if the lineup changed."""
        store = self._store(team_id, period_id)
        if not self._position_edits_allowed():
            return False
        return self.command_manager.execute_command(DropPlayerCommand(store, event))

    def drop_to_substitutes(self, team_id: str, period_id: int, player_id: Optional[str],
                            from_slot_id: Optional[str] = None) -> Optional[str]:
        """Move a player to the bench; returns the new bench slot id."""
        store = self._store(team_id, period_id)
        if not self._position_edits_allowed():
            return None
        command = SubstituteDropCommand(store, player_id, from_slot_id)
        if not self.command_manager.execute_command(command):
            return None
        return command.slot_id

    def remove_from_slot(self, team_id: str, period_id: int, slot_id: str) -> bool:
        store = self._store(team_id, period_id)
        if not self._position_edits_allowed():
            return False
        return self.command_manager.execute_command(RemovePlayerCommand(store, slot_id))

    def replace_selections(self, team_id: str, period_id: int,
                           selections: Mapping[str, Any]) -> bool:
        """Push externally loaded state into one scope (undoable)."""
        store = self._store(team_id, period_id)
        return self.command_manager.execute_command(ReplaceSelectionsCommand(store, dict(selections)))

    def undo(self) -> bool:
        return self.command_manager.undo()

    def redo(self) -> bool:
        return self.command_manager.redo()

    # ---------- Validation ---------- #

    def validate(self, team_id: str, period_id: int) -> ValidationResult:
        """Check one lineup against roster, squad and the team's formation."""
        service = LineupValidationService.for_context(
            roster_ids=[p.id for p in self.players] if self.players else None,
            squad_ids=self.squad_gate.members,
            template=self.get_team_template(team_id)
        )
        return service.validate(self._store(team_id, period_id).snapshot())

    # ---------- Serialization ---------- #

    def build_rows(self) -> List[Dict[str, Any]]:
        """team_selections rows for every occupied slot of the fixture."""
        scopes = [(tid, period, store.snapshot()) for tid, period, store in self.period_manager.iter_stores()]
        return PersistenceService.build_rows(
            self.fixture_id, scopes, self.captains, self.performance_categories
        )

    def to_json(self) -> Dict[str, Any]:
        """
        Convert the fixture's selection state to a JSON-serializable document.
        """
        return {
            "fixture_id": self.fixture_id,
            "format": self.format.value,
            "players": [p.to_dict() for p in self.players],
            "squad": self.squad_gate.members,
            "mode": self.squad_gate.mode.value,
            "captains": dict(self.captains),
            "team_templates": dict(self.team_templates),
            "performance_categories": dict(self.performance_categories),
            "periods": {
                tid: [p.to_dict() for p in self.period_manager.get_periods(tid)]
                for tid in self.period_manager.team_ids()
            },
            "team_selections": self.build_rows(),
        }

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> FixtureSelectionService:
        """
        Create a service from a saved document.

        Raises:
            ValueError: If periods or rows are malformed
        """
        service = cls(
            fixture_id=data.get("fixture_id"),
            fmt=FormationFormat.from_fixture(data),
            players=[PlayerRef.from_dict(p) for p in data.get("players", [])],
            squad=data.get("squad", []),
        )
        if data.get("mode"):
            service.squad_gate.set_mode(SquadMode(data["mode"]))
        service.captains = dict(data.get("captains", {}))
        service.team_templates = dict(data.get("team_templates", {}))
        service.performance_categories = dict(data.get("performance_categories", {}))

        for team_id, raw_periods in data.get("periods", {}).items():
            periods = [Period.from_dict(p) for p in raw_periods]
            service.period_manager.restore_periods(str(team_id), periods)
            for period in periods:
                key = category_key(period.period_id, str(team_id))
                category = service.performance_categories.setdefault(
                    key, PerformanceCategory.default().value
                )
                service._store(str(team_id), period.period_id).performance_category = category

        for (team_id, period_id), selections in PersistenceService.rows_to_selections(
                data.get("team_selections", [])).items():
            if service.period_manager.get_period(team_id, period_id) is None:
                logger.warning("Skipping rows for unknown period %s of team %s", period_id, team_id)
                continue
            service._store(team_id, period_id).replace_all(selections)

        service.mark_saved()
        return service
