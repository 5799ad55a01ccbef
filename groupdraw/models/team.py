"""Team and group data models."""

from typing import Optional
from pydantic import BaseModel

# The only confederation allowed twice in one group
UEFA = "UEFA"


class Team(BaseModel):
    """A national team drawn from one of the four pots."""

    id: str
    name: str
    pot: int
    confederation: str
    flag: Optional[str] = None

    class Config:
        """Pydantic configuration."""

        frozen = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Team):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_uefa(self) -> bool:
        """Whether the team belongs to the European confederation."""
        return self.confederation == UEFA


class Group(BaseModel):
    """A group of the final tournament (A-L)."""

    name: str
    teams: list[Team] = []

    @property
    def round(self) -> int:
        """Number of pots already drawn into this group."""
        return len(self.teams)

    def clone(self) -> "Group":
        """Copy with an independent member list."""
        return Group(name=self.name, teams=list(self.teams))
