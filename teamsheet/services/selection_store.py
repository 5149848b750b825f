"""
Selection store for one period-team scope.

The store holds the canonical selection map, a reverse player index that is
rebuilt on every commit, and the transient tap/drag marker. All edits go
through the pure functions in ``drop_resolver`` and are committed
atomically; the change callback receives the full new map after every edit
that actually changed it.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..models.selection import (
    Assignment, SelectionMap, is_empty_player_id, selections_from_dict,
    selections_to_dict, substitute_slot_id, substitute_slot_index
)
from .drop_resolver import (
    DropEvent, resolve_drop, resolve_remove, resolve_substitute_drop
)

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Dict[str, Dict[str, Any]]], None]


class SelectionStore:
    """
    Canonical "who is where" for one team in one period.

    Attributes:
        performance_category: Category stamped on every assignment committed
            here, restored snapshots included
        on_change: Called with the serialized map after each effective edit
    """

    def __init__(self, initial_selections: Optional[Mapping[str, Any]] = None,
                 on_change: Optional[ChangeCallback] = None,
                 performance_category: Optional[str] = None):
        self.on_change = on_change
        self.performance_category = performance_category
        self._selections: SelectionMap = {}
        self._player_index: Dict[str, str] = {}
        self._next_sub_index = 0
        self.selected_player_id: Optional[str] = None
        self.dragging_player_id: Optional[str] = None

        if initial_selections:
            self._commit(self._dedupe(initial_selections), notify=False)

    # ---------- Queries ---------- #

    def get_assignment(self, slot_id: str) -> Optional[Assignment]:
        """Get the assignment in a slot, if any."""
        return self._selections.get(slot_id)

    def get_player_slot(self, player_id: str) -> Optional[str]:
        """Reverse lookup: the slot a player occupies, if any."""
        return self._player_index.get(player_id)

    def assigned_player_ids(self) -> List[str]:
        """Players currently placed in any slot, in slot order."""
        return [a.player_id for a in self._selections.values()]

    def snapshot(self) -> SelectionMap:
        """Copy of the current map; assignments are immutable."""
        return dict(self._selections)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Serialized map in the seed/notification shape."""
        return selections_to_dict(self._selections)

    def __len__(self) -> int:
        return len(self._selections)

    def __contains__(self, slot_id: object) -> bool:
        return slot_id in self._selections

    # ---------- Tap / drag markers ---------- #

    def select_player(self, player_id: Optional[str]) -> Optional[str]:
        """
        Toggle the tapped-player marker.

        Selecting the currently selected player clears the marker.

        Returns:
            The player now selected, or None
        """
        if player_id is None or player_id == self.selected_player_id:
            self.selected_player_id = None
        else:
            self.selected_player_id = player_id
        return self.selected_player_id

    def start_drag(self, player_id: str) -> None:
        """Record the player picked up by a drag gesture."""
        self.dragging_player_id = player_id

    def end_drag(self) -> None:
        """Forget the dragged player (drag cancelled or finished)."""
        self.dragging_player_id = None

    def _clear_transient(self) -> None:
        self.selected_player_id = None
        self.dragging_player_id = None

    # ---------- Mutations ---------- #

    def apply_drop(self, event: DropEvent) -> bool:
        """
        Place a player on a slot, resolving collisions.

        When the event carries no player and no occupied source slot, the
        dragged player and then the tapped player are used.

        Returns:
            True if the map changed
        """
        if event.player_id is None:
            fallback = self.dragging_player_id or self.selected_player_id
            if fallback is not None:
                event = DropEvent(
                    to_slot_id=event.to_slot_id,
                    position=event.position,
                    player_id=fallback,
                    from_slot_id=event.from_slot_id
                )

        new_selections = resolve_drop(self._selections, event, self.performance_category)
        self._clear_transient()
        return self._commit(new_selections)

    def drop_to_substitutes(self, player_id: Optional[str],
                            from_slot_id: Optional[str] = None) -> Optional[str]:
        """
        Move a player to a newly numbered bench slot.

        Returns:
            The new bench slot id, or None if nothing changed
        """
        slot_id = substitute_slot_id(self._next_sub_index)
        new_selections = resolve_substitute_drop(
            self._selections, player_id, slot_id, from_slot_id, self.performance_category
        )
        self._clear_transient()
        if not self._commit(new_selections):
            return None
        return slot_id

    def remove(self, slot_id: str) -> bool:
        """Clear one slot. Returns True if the slot was occupied."""
        return self._commit(resolve_remove(self._selections, slot_id))

    def replace_all(self, new_selections: Optional[Mapping[str, Any]]) -> bool:
        """
        Atomically replace the whole map, e.g. with state loaded from storage.

        Accepts either Assignment values or serialized dictionaries. Seeds
        that place one player in several slots keep the first slot only.

        Returns:
            True if the map changed
        """
        return self._commit(self._dedupe(new_selections or {}))

    def clear(self) -> bool:
        """Remove every assignment."""
        return self._commit({})

    def set_performance_category(self, category: Optional[str]) -> bool:
        """Retag the scope and every assignment in it. Returns True if the map changed."""
        self.performance_category = category
        return self._commit(dict(self._selections))

    # ---------- Internals ---------- #

    @staticmethod
    def _dedupe(raw: Mapping[str, Any]) -> SelectionMap:
        if all(isinstance(v, Assignment) for v in raw.values()):
            candidates = {s: a for s, a in raw.items() if not is_empty_player_id(a.player_id)}
        else:
            candidates = selections_from_dict(
                {s: (v.to_dict() if isinstance(v, Assignment) else v) for s, v in raw.items()}
            )

        seen: Dict[str, str] = {}
        result: SelectionMap = {}
        for slot_id, assignment in candidates.items():
            if assignment.player_id in seen:
                logger.warning(
                    "Player %s seeded in both %s and %s; keeping %s",
                    assignment.player_id, seen[assignment.player_id], slot_id,
                    seen[assignment.player_id]
                )
                continue
            seen[assignment.player_id] = slot_id
            result[slot_id] = assignment
        return result

    def _stamp(self, selections: SelectionMap) -> SelectionMap:
        # Every assignment in a tagged scope carries the scope's category
        category = self.performance_category
        if category is None:
            return selections
        return {
            slot_id: a if a.performance_category == category
            else replace(a, performance_category=category)
            for slot_id, a in selections.items()
        }

    def _commit(self, new_selections: SelectionMap, notify: bool = True) -> bool:
        new_selections = self._stamp(new_selections)
        if new_selections == self._selections:
            return False

        self._selections = new_selections
        self._player_index = {a.player_id: s for s, a in new_selections.items()}

        sub_indices = [i for i in (substitute_slot_index(s) for s in new_selections) if i is not None]
        if sub_indices:
            self._next_sub_index = max(self._next_sub_index, max(sub_indices) + 1)

        if notify and self.on_change is not None:
            self.on_change(self.to_dict())
        return True
