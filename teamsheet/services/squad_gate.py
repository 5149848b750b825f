"""
Squad gate: which players may be placed on slots for a fixture.

Squad membership is deliberately decoupled from assignments. Removing a
player from the squad leaves any slot they hold untouched; the selection
stores stay the only authority on who is placed where.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable, List, Mapping, Optional, Sequence

from ..models.player import PlayerRef
from ..models.selection import Assignment, assigned_player_ids

logger = logging.getLogger(__name__)


class SquadMode(Enum):
    """Which edit the selection screen is in."""
    PICKING_SQUAD = "picking_squad"
    ASSIGNING_POSITIONS = "assigning_positions"


class SquadGate:
    """
    Tracks squad membership and the squad/positions mode.

    Attributes:
        on_squad_change: Called with the new member list after each change
    """

    def __init__(self, squad: Optional[Iterable[str]] = None,
                 on_squad_change: Optional[Callable[[List[str]], None]] = None):
        self._squad: List[str] = []
        for player_id in squad or []:
            if player_id not in self._squad:
                self._squad.append(player_id)
        self.on_squad_change = on_squad_change
        # An empty squad can only be edited in picking mode
        self._mode = SquadMode.ASSIGNING_POSITIONS if self._squad else SquadMode.PICKING_SQUAD

    @property
    def members(self) -> List[str]:
        """Squad player ids in the order they were added."""
        return list(self._squad)

    @property
    def mode(self) -> SquadMode:
        return self._mode

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._squad

    def __len__(self) -> int:
        return len(self._squad)

    def add_player_to_squad(self, player_id: str) -> bool:
        """Add a player; adding a member again is a no-op. Returns True if added."""
        if player_id in self._squad:
            return False
        self._squad.append(player_id)
        logger.debug("Added %s to squad", player_id)
        self._notify()
        return True

    def remove_player_from_squad(self, player_id: str) -> bool:
        """
        Remove a player; removing a non-member is a no-op.

        Existing assignments of the player are not cleared. An emptied squad
        forces the gate back into picking mode.

        Returns:
            True if the player was removed
        """
        if player_id not in self._squad:
            return False
        self._squad.remove(player_id)
        logger.debug("Removed %s from squad", player_id)
        if not self._squad and self._mode is SquadMode.ASSIGNING_POSITIONS:
            logger.info("Squad emptied; returning to squad picking")
            self._mode = SquadMode.PICKING_SQUAD
        self._notify()
        return True

    def get_available_squad_players(
        self,
        players: Sequence[PlayerRef],
        selection_maps: Iterable[Mapping[str, Assignment]] = ()
    ) -> List[PlayerRef]:
        """
        Squad members not placed in any of the given selection maps.

        Args:
            players: Full roster in display order
            selection_maps: Maps to treat as "already assigned"

        Returns:
            Roster entries, in roster order, that can still be dragged
        """
        assigned = assigned_player_ids(selection_maps)
        return [p for p in players if p.id in self._squad and p.id not in assigned]

    # ---------- Mode ---------- #

    def can_leave_squad_mode(self) -> bool:
        return bool(self._squad)

    def set_mode(self, mode: SquadMode) -> bool:
        """
        Switch mode. Leaving picking mode needs a non-empty squad.

        Returns:
            True if the gate is now in the requested mode
        """
        if mode is SquadMode.ASSIGNING_POSITIONS and not self.can_leave_squad_mode():
            logger.debug("Cannot assign positions with an empty squad")
            return False
        self._mode = mode
        return True

    def toggle_mode(self) -> SquadMode:
        """Flip between picking and assigning; returns the resulting mode."""
        if self._mode is SquadMode.PICKING_SQUAD:
            self.set_mode(SquadMode.ASSIGNING_POSITIONS)
        else:
            self.set_mode(SquadMode.PICKING_SQUAD)
        return self._mode

    def _notify(self) -> None:
        if self.on_squad_change is not None:
            self.on_squad_change(self.members)
