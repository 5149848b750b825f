"""Selection models: slot assignments and the per-scope selection map."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Set

from ..utils.constants import SUBSTITUTE_SLOT_PREFIX, UNASSIGNED_PLAYER_ID

# "SUB", "SUB1".."SUBn" and "sub-0".."sub-n" all name bench slots
_BENCH_LABEL_RE = re.compile(r"^SUB(-?\d+)?$")


def is_bench_label(label: Any) -> bool:
    """
    Check whether a position label names a substitute (bench) slot.

    Substitution status is derived from the label alone, so relabelling a
    slot changes whether it counts as a substitute.

    Example:
        >>> is_bench_label("SUB")
        True
        >>> is_bench_label("sub-3")
        True
        >>> is_bench_label("ST")
        False
    """
    if not isinstance(label, str) or not label:
        return False
    return bool(_BENCH_LABEL_RE.match(label.strip().upper()))


def is_empty_player_id(player_id: Optional[str]) -> bool:
    """True for missing ids and the "unassigned" placeholder."""
    return not player_id or player_id == UNASSIGNED_PLAYER_ID


def substitute_slot_id(index: int) -> str:
    """Build the slot id for the n-th bench slot."""
    return f"{SUBSTITUTE_SLOT_PREFIX}{index}"


def substitute_slot_index(slot_id: str) -> Optional[int]:
    """Return N for a "sub-N" slot id, otherwise None."""
    if not slot_id.startswith(SUBSTITUTE_SLOT_PREFIX):
        return None
    suffix = slot_id[len(SUBSTITUTE_SLOT_PREFIX):]
    return int(suffix) if suffix.isdigit() else None


@dataclass(frozen=True)
class Assignment:
    """Binding of one player to one slot."""
    player_id: str
    position: str
    is_substitution: bool = False
    performance_category: Optional[str] = None

    @classmethod
    def for_label(cls, player_id: str, position: str,
                  performance_category: Optional[str] = None) -> Assignment:
        """Create an assignment whose substitution flag follows the label."""
        return cls(
            player_id=player_id,
            position=position,
            is_substitution=is_bench_label(position),
            performance_category=performance_category
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "player_id": self.player_id,
            "position": self.position,
            "is_substitution": self.is_substitution,
            "performance_category": self.performance_category
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], slot_id: str = "") -> Assignment:
        """
        Create from dictionary.

        Accepts both snake_case keys and the camelCase keys sent by the
        browser client. A missing position falls back to the slot id and a
        non-string position (e.g. a number) is converted to text.
        """
        player_id = data.get("player_id", data.get("playerId"))
        raw_position = data.get("position")
        position = str(raw_position) if raw_position not in (None, "") else slot_id
        if "is_substitution" in data or "isSubstitution" in data:
            is_substitution = bool(data.get("is_substitution", data.get("isSubstitution")))
        else:
            is_substitution = is_bench_label(position)
        return cls(
            player_id=str(player_id) if player_id is not None else "",
            position=position,
            is_substitution=is_substitution,
            performance_category=data.get("performance_category", data.get("performanceCategory"))
        )


# One period-team scope: slot id -> assignment
SelectionMap = Dict[str, Assignment]


def selections_to_dict(selections: Mapping[str, Assignment]) -> Dict[str, Dict[str, Any]]:
    """Serialize a selection map in the seed/notification shape."""
    return {slot_id: assignment.to_dict() for slot_id, assignment in selections.items()}


def selections_from_dict(data: Optional[Mapping[str, Mapping[str, Any]]]) -> SelectionMap:
    """
    Deserialize a selection map, dropping empty and "unassigned" slots.

    Uniqueness is not enforced here; SelectionStore.replace_all does that.
    """
    selections: SelectionMap = {}
    for slot_id, raw in (data or {}).items():
        if not isinstance(raw, Mapping):
            continue
        assignment = Assignment.from_dict(raw, slot_id=slot_id)
        if is_empty_player_id(assignment.player_id):
            continue
        selections[slot_id] = assignment
    return selections


def assigned_player_ids(maps: Iterable[Mapping[str, Assignment]]) -> Set[str]:
    """Collect every player id assigned in any of the given maps."""
    players: Set[str] = set()
    for selections in maps:
        for assignment in selections.values():
            if not is_empty_player_id(assignment.player_id):
                players.add(assignment.player_id)
    return players
