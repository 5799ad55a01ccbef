"""Data models for the group draw."""

from groupdraw.models.team import Team, Group, UEFA
from groupdraw.models.draw import DrawSession, Placement, ValidationResult, Violation

__all__ = [
    "Team", "Group", "UEFA",
    "DrawSession", "Placement", "ValidationResult", "Violation",
]
