"""
Drop/swap resolution for formation slots.

Every function here is pure: it takes the current selection map plus one
discrete edit and returns a new map, never mutating its input. Invalid edits
(no identifiable player, dropping a player where they already are) resolve
to an unchanged copy rather than raising, since a lineup under edit is
allowed to be incomplete.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from ..models.selection import (
    Assignment, SelectionMap, is_empty_player_id
)
from ..utils.constants import SUBSTITUTE_LABEL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DropEvent:
    """
    A single drag-and-drop or tap-to-place gesture.

    Attributes:
        to_slot_id: Slot receiving the player
        position: Position label of the receiving slot
        player_id: Player being placed (drag source or tapped player)
        from_slot_id: Slot the player is dragged out of, if any
    """
    to_slot_id: str
    position: str
    player_id: Optional[str] = None
    from_slot_id: Optional[str] = None


def find_player_slot(selections: Mapping[str, Assignment], player_id: str,
                     exclude_slot_id: Optional[str] = None) -> Optional[str]:
    """Return the first slot holding ``player_id``, skipping ``exclude_slot_id``."""
    for slot_id, assignment in selections.items():
        if assignment.player_id == player_id and slot_id != exclude_slot_id:
            return slot_id
    return None


def resolve_drop(selections: Mapping[str, Assignment], event: DropEvent,
                 performance_category: Optional[str] = None) -> SelectionMap:
    """
    Compute the selection map after placing a player on a slot.

    Dragging from one occupied slot onto another swaps the two players, with
    the displaced player taking over the source slot's label. Placing a
    player directly (no source slot) onto an occupied slot unassigns the
    previous occupant.

    Args:
        selections: Current map for one period-team scope
        event: The drop gesture
        performance_category: Category tag for the newly written assignment

    Returns:
        New selection map (a copy even when nothing changed)
    """
    target = event.to_slot_id
    source = event.from_slot_id
    source_assignment = selections.get(source) if source else None

    if source_assignment is not None:
        player_to_assign = source_assignment.player_id
    else:
        player_to_assign = event.player_id

    if is_empty_player_id(player_to_assign) or not target:
        logger.debug("Drop onto %s ignored: no player to assign", target)
        return dict(selections)

    if source == target:
        logger.debug("Drop of %s onto its own source slot %s ignored", player_to_assign, target)
        return dict(selections)

    occupant_assignment = selections.get(target)
    occupant = occupant_assignment.player_id if occupant_assignment else None
    if occupant == player_to_assign:
        logger.debug("Player %s already in slot %s", player_to_assign, target)
        return dict(selections)

    current_slot_id = find_player_slot(selections, player_to_assign, exclude_slot_id=source)
    new_selections: SelectionMap = dict(selections)

    if source_assignment is not None and source_assignment.player_id == player_to_assign:
        del new_selections[source]
    elif current_slot_id and current_slot_id != target:
        del new_selections[current_slot_id]

    new_selections[target] = Assignment.for_label(
        player_to_assign, event.position, performance_category
    )

    if occupant and occupant != player_to_assign:
        if source_assignment is not None:
            # Swap: displaced player keeps the source slot's label and bench flag
            new_selections[source] = replace(source_assignment, player_id=occupant)
            logger.debug("Swapped %s (%s) with %s (%s)", player_to_assign, target, occupant, source)
        else:
            for slot_id in [s for s, a in new_selections.items()
                            if a.player_id == occupant and s != target]:
                del new_selections[slot_id]
            logger.debug("Player %s displaced from %s by %s", occupant, target, player_to_assign)

    return new_selections


def resolve_substitute_drop(selections: Mapping[str, Assignment], player_id: Optional[str],
                            sub_slot_id: str, from_slot_id: Optional[str] = None,
                            performance_category: Optional[str] = None) -> SelectionMap:
    """
    Move a player onto a new bench slot.

    The player is cleared from every other slot they hold, so the result
    keeps each player in at most one slot.

    Args:
        selections: Current map
        player_id: Player dropped on the bench area (falls back to the
            occupant of ``from_slot_id``)
        sub_slot_id: Fresh bench slot id (e.g. "sub-3")
        from_slot_id: Slot the player was dragged from, if any
        performance_category: Category tag for the bench assignment
    """
    source_assignment = selections.get(from_slot_id) if from_slot_id else None
    if is_empty_player_id(player_id) and source_assignment is not None:
        player_id = source_assignment.player_id
    if is_empty_player_id(player_id):
        logger.debug("Substitute drop ignored: no player to assign")
        return dict(selections)

    new_selections: SelectionMap = {
        slot_id: assignment for slot_id, assignment in selections.items()
        if assignment.player_id != player_id
    }
    new_selections[sub_slot_id] = Assignment(
        player_id=player_id,
        position=SUBSTITUTE_LABEL,
        is_substitution=True,
        performance_category=performance_category
    )
    return new_selections


def resolve_remove(selections: Mapping[str, Assignment], slot_id: str) -> SelectionMap:
    """Clear one slot, leaving the rest untouched."""
    new_selections: SelectionMap = dict(selections)
    new_selections.pop(slot_id, None)
    return new_selections
