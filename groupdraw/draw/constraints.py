"""Confederation rules for seating a team in a group."""

from typing import Iterable

from groupdraw.models import Team, Group

MAX_UEFA_PER_GROUP = 2


def uefa_count(group: Group) -> int:
    """Number of UEFA members in the group."""
    return sum(1 for team in group.teams if team.is_uefa)


def has_uefa_room(group: Group) -> bool:
    return uefa_count(group) < MAX_UEFA_PER_GROUP


def is_valid_placement(group: Group, team: Team) -> bool:
    """
    Check whether a team may join a group given its current members.

    UEFA teams need the group to hold fewer than two UEFA members; any other
    team needs the group to hold no member of its confederation.
    """
    if team.is_uefa:
        return has_uefa_room(group)
    return all(member.confederation != team.confederation for member in group.teams)


def valid_teams_for_group(group: Group, teams: Iterable[Team]) -> list[Team]:
    """Teams from ``teams`` that could legally join ``group`` right now."""
    return [team for team in teams if is_valid_placement(group, team)]


def needy_group_indices(groups: list[Group], pot_index: int) -> list[int]:
    """Indices of the groups still waiting for a team from ``pot_index``."""
    return [index for index, group in enumerate(groups) if len(group.teams) == pot_index]
