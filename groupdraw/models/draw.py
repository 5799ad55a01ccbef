"""Draw session state and engine results."""

import uuid
from typing import Optional, Any
from pydantic import BaseModel

from groupdraw.models.team import Team, Group
from groupdraw.types import SessionDict

# Pot index of a finished draw (past the last pot)
FINISHED_POT_INDEX = 4


class Placement(BaseModel):
    """A team selected for a group, not yet committed."""

    team: Team
    group_index: int


class Violation(BaseModel):
    """One broken rule in one group."""

    group: str
    kind: str  # NoUefaTeam, TooManyUefaTeams, DuplicateConfederation
    message: str


class ValidationResult(BaseModel):
    """Outcome of validating a completed set of groups."""

    valid: bool
    errors: list[str] = []
    violations: list[Violation] = []


class DrawSession:
    """
    Mutable state of one draw.

    Only the DrawEngine mutates a session. ``remaining`` holds the teams of the
    active pot that have not been placed yet, in registry order.
    """

    def __init__(
        self,
        groups: list[Group],
        pot_index: int = 0,
        remaining: Optional[list[Team]] = None,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or uuid.uuid4().hex
        self.groups = groups
        self.pot_index = pot_index
        self.remaining: list[Team] = remaining or []
        self.pending: Optional[Placement] = None
        self.unplaced: list[Team] = []
        self.shared_id: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        """Whether every pot has been drawn."""
        return self.pot_index >= FINISHED_POT_INDEX

    @property
    def pot_number(self) -> Optional[int]:
        """1-based number of the active pot, None once finished."""
        return None if self.is_finished else self.pot_index + 1

    def placed_teams(self) -> list[Team]:
        """All teams currently sitting in a group."""
        return [team for group in self.groups for team in group.teams]

    def groups_data(self) -> list[dict[str, Any]]:
        """Groups as plain JSON-compatible data (the shared draw format)."""
        return [group.model_dump(mode="json") for group in self.groups]

    def to_dict(self) -> SessionDict:
        """API representation of the session."""
        return {
            "id": self.id,
            "groups": self.groups_data(),
            "potIndex": self.pot_index,
            "potNumber": self.pot_number,
            "remaining": [team.model_dump(mode="json") for team in self.remaining],
            "pending": (
                self.pending.model_dump(mode="json") if self.pending else None
            ),
            "unplaced": [team.model_dump(mode="json") for team in self.unplaced],
            "isFinished": self.is_finished,
            "sharedId": self.shared_id,
        }
