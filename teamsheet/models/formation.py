"""Formation formats, templates and pitch slot definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class FormationFormat(Enum):
    """Match formats a fixture can be played in."""
    FIVE_A_SIDE = "5-a-side"
    SEVEN_A_SIDE = "7-a-side"
    NINE_A_SIDE = "9-a-side"
    ELEVEN_A_SIDE = "11-a-side"

    @classmethod
    def from_fixture(cls, fixture: Optional[Mapping[str, Any]]) -> FormationFormat:
        """Read the format of a fixture record, defaulting to 7-a-side."""
        raw = (fixture or {}).get("format")
        try:
            return cls(raw)
        except ValueError:
            return cls.SEVEN_A_SIDE


@dataclass(frozen=True)
class FieldPosition:
    """A pitch slot with coordinates (percent of pitch width/height)."""
    slot_id: str
    x: float  # 0-100, left to right
    y: float  # 0-100, attacking end to own goal

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"slot_id": self.slot_id, "x": self.x, "y": self.y}


# Every pitch slot the editor knows about; goalkeeper at the bottom
POSITION_DEFINITIONS: Dict[str, FieldPosition] = {
    p.slot_id: p for p in [
        FieldPosition("GK", 50, 95),
        # Defenders
        FieldPosition("DL", 15, 85),
        FieldPosition("DCL", 35, 85),
        FieldPosition("DC", 50, 85),
        FieldPosition("DCR", 65, 85),
        FieldPosition("DR", 85, 85),
        # Wing backs
        FieldPosition("WBL", 15, 70),
        FieldPosition("WBR", 85, 70),
        # Defensive midfield
        FieldPosition("DM", 50, 70),
        FieldPosition("DML", 35, 70),
        FieldPosition("DMR", 65, 70),
        # Midfielders
        FieldPosition("ML", 15, 55),
        FieldPosition("MCL", 35, 55),
        FieldPosition("MC", 50, 55),
        FieldPosition("MCR", 65, 55),
        FieldPosition("MR", 85, 55),
        # Attacking midfielders
        FieldPosition("AML", 25, 40),
        FieldPosition("AMC", 50, 40),
        FieldPosition("AMR", 75, 40),
        # Strikers
        FieldPosition("STL", 30, 20),
        FieldPosition("STC", 50, 20),
        FieldPosition("STR", 70, 20),
    ]
}

ALL_TEMPLATE_NAME = "All"


@dataclass
class FormationTemplate:
    """A named set of pitch slots for one format."""
    name: str
    format: FormationFormat
    slot_ids: List[str] = field(default_factory=list)

    @property
    def uses_all_positions(self) -> bool:
        """The "All" template offers every known slot."""
        return not self.slot_ids

    def get_slot_ids(self) -> List[str]:
        """Slot ids offered on the pitch for this template."""
        if self.uses_all_positions:
            return list(POSITION_DEFINITIONS.keys())
        return list(self.slot_ids)

    def get_field_positions(self) -> List[FieldPosition]:
        """Field positions with coordinates; unknown slot ids are skipped."""
        return [POSITION_DEFINITIONS[s] for s in self.get_slot_ids() if s in POSITION_DEFINITIONS]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "format": self.format.value,
            "slot_ids": self.get_slot_ids(),
            "positions": [p.to_dict() for p in self.get_field_positions()]
        }


_TEMPLATE_SLOTS: Dict[FormationFormat, Dict[str, List[str]]] = {
    FormationFormat.FIVE_A_SIDE: {
        ALL_TEMPLATE_NAME: [],
    },
    FormationFormat.SEVEN_A_SIDE: {
        "1-1-3-1": ["GK", "DC", "DM", "ML", "MC", "MR", "STC"],
        "2-3-1": ["GK", "DL", "DR", "ML", "MC", "MR", "STC"],
        "3-2-1": ["GK", "DL", "DC", "DR", "MCL", "MCR", "STC"],
        "2-1-2-1": ["GK", "DL", "DR", "DM", "AML", "AMR", "STC"],
        ALL_TEMPLATE_NAME: [],
    },
    FormationFormat.NINE_A_SIDE: {
        "3-2-3": ["GK", "DL", "DC", "DR", "MCL", "MCR", "AML", "STC", "AMR"],
        "2-4-2": ["GK", "DCL", "DCR", "ML", "MCL", "MCR", "MR", "STL", "STR"],
        "3-3-2": ["GK", "DL", "DC", "DR", "ML", "MC", "MR", "STL", "STR"],
        "3-1-3-1": ["GK", "DL", "DC", "DR", "DM", "ML", "MC", "MR", "STC"],
        ALL_TEMPLATE_NAME: [],
    },
    FormationFormat.ELEVEN_A_SIDE: {
        "4-4-2": ["GK", "DL", "DCL", "DCR", "DR", "ML", "MCL", "MCR", "MR", "STL", "STR"],
        "4-3-3": ["GK", "DL", "DCL", "DCR", "DR", "DM", "MCL", "MCR", "AML", "STC", "AMR"],
        "3-5-2": ["GK", "DCL", "DC", "DCR", "ML", "MCL", "MC", "MCR", "MR", "STL", "STR"],
        "4-2-3-1": ["GK", "DL", "DCL", "DCR", "DR", "DML", "DMR", "AML", "AMC", "AMR", "STC"],
        ALL_TEMPLATE_NAME: [],
    },
}


class FormationTemplates:
    """Pre-defined formation templates for each match format."""

    @staticmethod
    def get_templates_for_format(fmt: FormationFormat) -> List[FormationTemplate]:
        """Get every template available for a format."""
        return [
            FormationTemplate(name=name, format=fmt, slot_ids=list(slots))
            for name, slots in _TEMPLATE_SLOTS.get(fmt, {ALL_TEMPLATE_NAME: []}).items()
        ]

    @staticmethod
    def get_template(fmt: FormationFormat, name: str) -> FormationTemplate:
        """Get a template by name, falling back to the "All" template."""
        slots = _TEMPLATE_SLOTS.get(fmt, {}).get(name)
        if slots is None:
            return FormationTemplate(name=ALL_TEMPLATE_NAME, format=fmt)
        return FormationTemplate(name=name, format=fmt, slot_ids=list(slots))
