"""
Type definitions for the group draw API.

Provides TypedDict classes for structured responses and IDE support.
"""

from typing import TypedDict, Optional, List


class TeamDict(TypedDict, total=False):
    """Team information."""
    id: str
    name: str
    pot: int
    confederation: str
    flag: Optional[str]


class GroupDict(TypedDict):
    """A group and its members, in draw order."""
    name: str
    teams: List[TeamDict]


class PlacementDict(TypedDict):
    """A drawn team and the group it is heading to."""
    team: TeamDict
    group_index: int


class SessionDict(TypedDict, total=False):
    """Draw session state."""
    id: str
    groups: List[GroupDict]
    potIndex: int
    potNumber: Optional[int]  # None once finished
    remaining: List[TeamDict]
    pending: Optional[PlacementDict]
    unplaced: List[TeamDict]
    isFinished: bool
    sharedId: Optional[str]

