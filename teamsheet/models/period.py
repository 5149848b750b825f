"""
Period model for the Teamsheet team-selection engine.

A period is a time-bounded segment of a fixture (usually a half) with its own
independent lineup. Period ids encode the half they belong to: ``100`` and
``101`` are periods of the first half, ``200`` opens the second half.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from ..utils.constants import (
    DEFAULT_PERFORMANCE_CATEGORY, DEFAULT_PERIOD_DURATION_MIN, PERIOD_HALF_BASE
)


class PerformanceCategory(Enum):
    """Ability groupings a team or period can be tagged with."""
    MESSI = "MESSI"
    RONALDO = "RONALDO"
    JAGS = "JAGS"

    @classmethod
    def default(cls) -> PerformanceCategory:
        return cls(DEFAULT_PERFORMANCE_CATEGORY)


def half_number(period_id: int) -> int:
    """Return the half a period id belongs to."""
    return period_id // PERIOD_HALF_BASE


def half_base_id(half: int) -> int:
    """Return the first period id of a half."""
    return half * PERIOD_HALF_BASE


@dataclass
class Period:
    """
    Represents one period of a team's fixture.

    Attributes:
        period_id: Sortable id; ``period_id // 100`` is the half number
        name: Display label such as "First Half"
        duration: Length in minutes
    """
    period_id: int
    name: str
    duration: int = DEFAULT_PERIOD_DURATION_MIN

    @property
    def half(self) -> int:
        return half_number(self.period_id)

    @property
    def display_name(self) -> str:
        """Label shown to the coach, falling back to the id for unnamed periods."""
        if self.name:
            return self.name
        if self.period_id == half_base_id(1):
            return "First Half"
        if self.period_id == half_base_id(2):
            return "Second Half"
        return f"Period {self.period_id}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "period_id": self.period_id,
            "name": self.name,
            "duration": self.duration
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Period:
        """Create from dictionary."""
        return cls(
            period_id=int(data["period_id"]),
            name=data.get("name", ""),
            duration=int(data.get("duration", DEFAULT_PERIOD_DURATION_MIN))
        )
