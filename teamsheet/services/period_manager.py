"""
Period/team partitioning for team selections.

Each team owns an id-sorted list of periods, and every (team, period) pair
owns its own SelectionStore. Period ids group into halves by hundreds, so a
period added to the first half after ``100`` becomes ``101``.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models.period import Period, half_base_id, half_number
from ..utils.constants import DEFAULT_PERIODS
from .errors import PeriodError, UnknownScopeError
from .selection_store import SelectionStore

logger = logging.getLogger(__name__)

ScopeKey = Tuple[str, int]
# (team_id, period_id, serialized selections)
ScopeChangeCallback = Callable[[str, int, Dict[str, Dict[str, Any]]], None]


class PeriodManager:
    """
    Maintains the periods of every team and one SelectionStore per period.

    Attributes:
        on_selection_change: Called with (team_id, period_id, selections)
            whenever any scope's store changes
    """

    def __init__(self, on_selection_change: Optional[ScopeChangeCallback] = None):
        self.on_selection_change = on_selection_change
        self._periods: Dict[str, List[Period]] = {}
        self._stores: Dict[ScopeKey, SelectionStore] = {}

    # ---------- Queries ---------- #

    def team_ids(self) -> List[str]:
        return list(self._periods.keys())

    def get_periods(self, team_id: str) -> List[Period]:
        """Periods of a team, sorted by id."""
        return list(self._periods.get(team_id, []))

    def get_period(self, team_id: str, period_id: int) -> Optional[Period]:
        for period in self._periods.get(team_id, []):
            if period.period_id == period_id:
                return period
        return None

    def get_store(self, team_id: str, period_id: int) -> SelectionStore:
        """
        Get the selection store of one scope.

        Raises:
            UnknownScopeError: If the team has no such period
        """
        store = self._stores.get((team_id, period_id))
        if store is None:
            raise UnknownScopeError(f"No period {period_id} for team {team_id}")
        return store

    def iter_stores(self, team_id: Optional[str] = None):
        """Yield (team_id, period, store) in team then period order."""
        for tid, periods in self._periods.items():
            if team_id is not None and tid != team_id:
                continue
            for period in periods:
                yield tid, period, self._stores[(tid, period.period_id)]

    def previous_period(self, team_id: str, period_id: int) -> Optional[Period]:
        """The period sorted immediately before ``period_id``, if any."""
        earlier = [p for p in self._periods.get(team_id, []) if p.period_id < period_id]
        return earlier[-1] if earlier else None

    # ---------- Mutations ---------- #

    def add_period(self, team_id: str, name: str, duration: int,
                   half: Optional[int] = None) -> Period:
        """
        Append a period to a team with an empty selection map.

        Args:
            team_id: Team to add to
            name: Display label
            duration: Length in minutes
            half: Half to add the period to; defaults to the half of the
                team's last period, or the first half

        Returns:
            The new period

        Raises:
            PeriodError: On a bad duration or half, or when the half has no
                free period ids left
        """
        duration = self._validate_duration(duration)
        periods = self._periods.setdefault(team_id, [])

        if half is None:
            half = periods[-1].half if periods else 1
        if half < 1:
            raise PeriodError(f"Half number must be positive, got {half}")

        existing_ids = [p.period_id for p in periods if half_number(p.period_id) == half]
        new_id = max(existing_ids) + 1 if existing_ids else half_base_id(half)
        if half_number(new_id) != half:
            raise PeriodError(f"Half {half} of team {team_id} has no free period ids")
        if (team_id, new_id) in self._stores:
            raise PeriodError(f"Period {new_id} already exists for team {team_id}")

        period = Period(period_id=new_id, name=name, duration=duration)
        periods.append(period)
        periods.sort(key=lambda p: p.period_id)
        self._stores[(team_id, new_id)] = self._create_store(team_id, new_id)

        logger.info("Added period %s (%s) to team %s", new_id, name, team_id)
        return period

    def edit_period(self, team_id: str, period_id: int, **updates: Any) -> Optional[Period]:
        """
        Merge name/duration updates into a period without touching its lineup.

        Returns:
            The updated period, or None if the period does not exist
        """
        period = self.get_period(team_id, period_id)
        if period is None:
            logger.debug("edit_period: team %s has no period %s", team_id, period_id)
            return None

        if "duration" in updates and updates["duration"] is not None:
            period.duration = self._validate_duration(updates["duration"])
        if "name" in updates and updates["name"] is not None:
            period.name = str(updates["name"])
        return period

    def delete_period(self, team_id: str, period_id: int) -> bool:
        """
        Remove a period and its selection map.

        Per-period metadata held elsewhere (performance categories) is the
        caller's to clean up.

        Returns:
            True if a period was removed
        """
        periods = self._periods.get(team_id, [])
        remaining = [p for p in periods if p.period_id != period_id]
        if len(remaining) == len(periods):
            return False

        self._periods[team_id] = remaining
        del self._stores[(team_id, period_id)]
        logger.info("Deleted period %s from team %s", period_id, team_id)
        return True

    def initialize_default_periods(self, team_id: str) -> List[Period]:
        """
        Seed "First Half" and "Second Half" for a team that has no periods.

        Idempotent: a team with periods is left as it is.
        """
        if self._periods.get(team_id):
            return self.get_periods(team_id)

        self._periods[team_id] = [
            Period(period_id=pid, name=name, duration=duration)
            for pid, name, duration in DEFAULT_PERIODS
        ]
        for pid, _, _ in DEFAULT_PERIODS:
            self._stores[(team_id, pid)] = self._create_store(team_id, pid)
        return self.get_periods(team_id)

    def restore_periods(self, team_id: str, periods: List[Period]) -> None:
        """Replace a team's periods with saved ones; every lineup starts empty."""
        self.remove_team(team_id)
        restored = sorted(periods, key=lambda p: p.period_id)
        self._periods[team_id] = restored
        for period in restored:
            self._validate_duration(period.duration)
            self._stores[(team_id, period.period_id)] = self._create_store(team_id, period.period_id)

    def remove_team(self, team_id: str) -> None:
        """Drop a team with all its periods."""
        for period in self._periods.pop(team_id, []):
            self._stores.pop((team_id, period.period_id), None)

    # ---------- Internals ---------- #

    @staticmethod
    def _validate_duration(duration: Any) -> int:
        try:
            minutes = int(duration)
        except (TypeError, ValueError):
            raise PeriodError(f"Invalid period duration: {duration!r}")
        if minutes <= 0:
            raise PeriodError(f"Period duration must be positive, got {minutes}")
        return minutes

    def _create_store(self, team_id: str, period_id: int) -> SelectionStore:
        def _notify(selections: Dict[str, Dict[str, Any]]) -> None:
            if self.on_selection_change is not None:
                self.on_selection_change(team_id, period_id, selections)

        return SelectionStore(on_change=_notify)
