"""
Player reference model for the Teamsheet team-selection engine.

The engine never owns player records; it only reads the roster supplied by
the surrounding application to build the available-players list.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PlayerRef:
    """Read-only roster entry as supplied by the caller."""
    id: str
    name: str
    squad_number: Optional[int] = None

    @property
    def short_label(self) -> str:
        """Squad number if known, otherwise the first initial (used on the pitch)."""
        if self.squad_number is not None:
            return str(self.squad_number)
        return self.name[:1].upper()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "name": self.name, "squad_number": self.squad_number}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PlayerRef:
        """Create from dictionary."""
        squad_number = data.get("squad_number")
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            squad_number=int(squad_number) if squad_number not in (None, "") else None
        )
