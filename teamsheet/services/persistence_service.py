"""
Persistence service for the Teamsheet application.

This module turns team selections into ``team_selections`` rows (one per
occupied slot, keyed by team number, period and slot) and saves/loads the
fixture's selection document to/from JSON files.
"""
import json
import logging
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..models.period import Period
from ..models.selection import Assignment, is_empty_player_id
from ..utils.constants import DEFAULT_PERFORMANCE_CATEGORY

logger = logging.getLogger(__name__)

# (team_id, period, selections of that scope)
ScopeSelections = Tuple[str, Period, Mapping[str, Assignment]]


def _team_number(team_id: str) -> Any:
    return int(team_id) if str(team_id).isdigit() else team_id


def category_key(period_id: int, team_id: str) -> str:
    """Key used for per-period metadata such as performance categories."""
    return f"{period_id}-{team_id}"


class PersistenceService:
    """
    Service for converting selections to rows and persisting them as JSON.
    """

    @staticmethod
    def build_rows(fixture_id: Optional[str], scopes: Iterable[ScopeSelections],
                   captains: Optional[Mapping[str, str]] = None,
                   categories: Optional[Mapping[str, str]] = None) -> List[Dict[str, Any]]:
        """
        Build one row per occupied slot.

        Args:
            fixture_id: Fixture the selections belong to
            scopes: (team_id, period, selections) for every period of every team
            captains: team_id -> captain player id
            categories: "{period_id}-{team_id}" -> performance category

        Returns:
            Rows ready for insertion into a team_selections table
        """
        captains = captains or {}
        categories = categories or {}
        rows: List[Dict[str, Any]] = []

        for team_id, period, selections in scopes:
            scope_category = categories.get(category_key(period.period_id, team_id))
            for slot_id, assignment in selections.items():
                if is_empty_player_id(assignment.player_id):
                    continue
                rows.append({
                    "fixture_id": fixture_id,
                    "team_id": team_id,
                    "team_number": _team_number(team_id),
                    "period_id": period.period_id,
                    "slot_id": slot_id,
                    "player_id": assignment.player_id,
                    "position": assignment.position or slot_id,
                    "is_substitution": assignment.is_substitution,
                    "performance_category": (
                        assignment.performance_category or scope_category
                        or DEFAULT_PERFORMANCE_CATEGORY
                    ),
                    "is_captain": captains.get(team_id) == assignment.player_id,
                    "duration": period.duration,
                })
        return rows

    @staticmethod
    def rows_to_selections(rows: Iterable[Mapping[str, Any]]) -> Dict[Tuple[str, int], Dict[str, Dict[str, Any]]]:
        """
        Group rows back into serialized selection maps per (team_id, period_id).

        The team comes from ``team_id`` when present, so ids such as "01"
        survive the trip; rows carrying only ``team_number`` still load.

        Raises:
            ValueError: If a row lacks team, period or player information
        """
        grouped: Dict[Tuple[str, int], Dict[str, Dict[str, Any]]] = {}
        for row in rows:
            try:
                team_id = str(row["team_id"] if row.get("team_id") is not None else row["team_number"])
                period_id = int(row["period_id"])
                player_id = row["player_id"]
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"Invalid team selection row: {row!r}") from exc

            slot_id = row.get("slot_id") or row.get("position")
            if not slot_id:
                raise ValueError(f"Team selection row has no slot: {row!r}")

            entry = {"player_id": player_id, "position": row.get("position") or slot_id,
                     "performance_category": row.get("performance_category")}
            if "is_substitution" in row:
                entry["is_substitution"] = bool(row["is_substitution"])
            grouped.setdefault((team_id, period_id), {})[slot_id] = entry
        return grouped

    @staticmethod
    def save_to_file(document: Mapping[str, Any], file_path: str) -> None:
        """
        Save a fixture selection document to a JSON file.

        Raises:
            IOError: If file cannot be written
            OSError: If path is invalid
        """
        directory = os.path.dirname(file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
        logger.info("Saved %d selection rows to %s",
                    len(document.get("team_selections", [])), file_path)

    @staticmethod
    def load_from_file(file_path: str) -> Dict[str, Any]:
        """
        Load a fixture selection document from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file contains invalid JSON
            ValueError: If the JSON is not an object
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Selection file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Selection file must contain a JSON object: {file_path}")
        return data
