"""
Models package for the Teamsheet team-selection engine.

This package contains the core data models used throughout the application.
"""
from .selection import (
    Assignment, SelectionMap, is_bench_label, selections_to_dict, selections_from_dict
)
from .period import Period, PerformanceCategory
from .player import PlayerRef
from .formation import FormationFormat, FormationTemplate, FormationTemplates, FieldPosition

__all__ = [
    "Assignment", "SelectionMap", "is_bench_label", "selections_to_dict",
    "selections_from_dict", "Period", "PerformanceCategory", "PlayerRef",
    "FormationFormat", "FormationTemplate", "FormationTemplates", "FieldPosition"
]
