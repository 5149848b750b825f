"""
Lineup validation for seeded and live selection maps.

Validation never blocks an edit; it reports problems so the caller can warn
the coach before saving (e.g. a lineup loaded from storage that places one
player twice, or a player who was dropped from the squad but still holds a
slot).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..models.formation import FormationTemplate
from ..models.selection import is_bench_label, is_empty_player_id


class ValidationResult:
    """Result of a validation operation with success status and error messages."""

    def __init__(self, is_valid: bool = True, errors: Optional[List[str]] = None,
                 warnings: Optional[List[str]] = None):
        self.is_valid = is_valid
        self.errors = errors or []
        self.warnings = warnings or []

    def add_error(self, error: str) -> None:
        """Add an error message and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning; warnings do not invalidate the result."""
        self.warnings.append(warning)

    def combine(self, other: ValidationResult) -> ValidationResult:
        """Combine with another validation result."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"is_valid": self.is_valid, "errors": self.errors, "warnings": self.warnings}


def _player_id(raw: Any) -> Optional[str]:
    if isinstance(raw, Mapping):
        return raw.get("player_id", raw.get("playerId"))
    return getattr(raw, "player_id", None)


def _position(raw: Any) -> Optional[str]:
    if isinstance(raw, Mapping):
        return raw.get("position")
    return getattr(raw, "position", None)


class ValidationRule(ABC):
    """Abstract base class for validation rules following SRP."""

    @abstractmethod
    def validate(self, selections: Mapping[str, Any]) -> ValidationResult:
        """Perform validation and return result."""
        pass


class DuplicatePlayerRule(ValidationRule):
    """A player may occupy at most one slot."""

    def validate(self, selections: Mapping[str, Any]) -> ValidationResult:
        result = ValidationResult()
        seen: Dict[str, str] = {}
        for slot_id, raw in selections.items():
            player_id = _player_id(raw)
            if is_empty_player_id(player_id):
                continue
            if player_id in seen:
                result.add_error(
                    f"Player '{player_id}' is assigned to both {seen[player_id]} and {slot_id}"
                )
            else:
                seen[player_id] = slot_id
        return result


class KnownPlayerRule(ValidationRule):
    """Every assigned player must be on the roster."""

    def __init__(self, roster_ids: Iterable[str]):
        self.roster_ids = set(roster_ids)

    def validate(self, selections: Mapping[str, Any]) -> ValidationResult:
        result = ValidationResult()
        for slot_id, raw in selections.items():
            player_id = _player_id(raw)
            if not is_empty_player_id(player_id) and player_id not in self.roster_ids:
                result.add_error(f"Player '{player_id}' in {slot_id} is not in the roster")
        return result


class SquadMembershipRule(ValidationRule):
    """Assigned players outside the squad are reported as warnings."""

    def __init__(self, squad_ids: Iterable[str]):
        self.squad_ids = set(squad_ids)

    def validate(self, selections: Mapping[str, Any]) -> ValidationResult:
        result = ValidationResult()
        for slot_id, raw in selections.items():
            player_id = _player_id(raw)
            if not is_empty_player_id(player_id) and player_id not in self.squad_ids:
                result.add_warning(f"Player '{player_id}' in {slot_id} is not in the squad")
        return result


class TemplateSlotRule(ValidationRule):
    """Pitch slots must exist in the formation template; bench slots always pass."""

    def __init__(self, template: FormationTemplate):
        self.slot_ids = set(template.get_slot_ids())
        self.template_name = template.name

    def validate(self, selections: Mapping[str, Any]) -> ValidationResult:
        result = ValidationResult()
        for slot_id, raw in selections.items():
            if is_bench_label(slot_id) or is_bench_label(_position(raw)):
                continue
            if slot_id not in self.slot_ids:
                result.add_warning(
                    f"Slot {slot_id} is not part of the {self.template_name} formation"
                )
        return result


class LineupValidationService:
    """Runs the configured rules over a selection map."""

    def __init__(self, rules: Optional[List[ValidationRule]] = None):
        self.rules: List[ValidationRule] = rules if rules is not None else [DuplicatePlayerRule()]

    @classmethod
    def for_context(cls, roster_ids: Optional[Iterable[str]] = None,
                    squad_ids: Optional[Iterable[str]] = None,
                    template: Optional[FormationTemplate] = None) -> LineupValidationService:
        """Build the rule set that applies to what the caller knows."""
        rules: List[ValidationRule] = [DuplicatePlayerRule()]
        if roster_ids is not None:
            rules.append(KnownPlayerRule(roster_ids))
        if squad_ids is not None:
            rules.append(SquadMembershipRule(squad_ids))
        if template is not None:
            rules.append(TemplateSlotRule(template))
        return cls(rules)

    def validate(self, selections: Mapping[str, Any]) -> ValidationResult:
        result = ValidationResult()
        for rule in self.rules:
            result = result.combine(rule.validate(selections))
        return result
