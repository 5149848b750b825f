"""Exceptions raised at the boundary of the team-selection engine."""


class SelectionError(Exception):
    """Base class for team-selection configuration errors."""
    pass


class UnknownScopeError(SelectionError):
    """Raised when a team or team/period pair does not exist."""
    pass


class PeriodError(SelectionError):
    """Raised for invalid period definitions (e.g. non-positive duration)."""
    pass
