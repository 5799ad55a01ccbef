"""
Placement selection heuristics.

Both modes work most-constrained-first: the group with the fewest legal
candidates is served before groups that could still take almost anyone.

Tie-breaks differ between the modes. Stepwise selection takes the first
minimal group in group order; batch completion picks uniformly at random
among the minimal groups.
"""

import logging
import random
from typing import Optional

from groupdraw.models import Team, Group, Placement, UEFA
from groupdraw.draw.constraints import (
    is_valid_placement,
    valid_teams_for_group,
    needy_group_indices,
    has_uefa_room,
)
from groupdraw.draw.exceptions import PlacementDeadEnd

logger = logging.getLogger(__name__)


# =============================================================================
# STEPWISE MODE
# =============================================================================

def select_stepwise(
    groups: list[Group],
    pot_index: int,
    remaining: list[Team],
    rng: random.Random,
) -> Placement:
    """
    Pick the next (group, team) pair for an interactive draw.

    Args:
        groups: Current groups (not modified)
        pot_index: Index of the active pot (0-3)
        remaining: Teams of the active pot that are still undrawn
        rng: Random source for the team choice

    Returns:
        The selected placement; committing it is up to the caller

    Raises:
        PlacementDeadEnd: If no group is waiting or the most constrained
            group has no legal team left
    """
    needy = needy_group_indices(groups, pot_index)
    if not needy:
        logger.error("No groups need a team from pot %d but %d teams remain",
                     pot_index + 1, len(remaining))
        raise PlacementDeadEnd(f"No group is waiting for pot {pot_index + 1}")

    constraints = [
        (index, valid_teams_for_group(groups[index], remaining))
        for index in needy
    ]
    # min() keeps the first of equal candidates
    group_index, valid_teams = min(constraints, key=lambda entry: len(entry[1]))

    if not valid_teams:
        logger.error("Dead-end: no valid teams for group %s", groups[group_index].name)
        raise PlacementDeadEnd(
            f"No remaining team can join group {groups[group_index].name}",
            group_index=group_index,
        )

    team = rng.choice(valid_teams)
    return Placement(team=team, group_index=group_index)


# =============================================================================
# BATCH MODE
# =============================================================================

def order_batch_pool(
    groups: list[Group],
    pot_index: int,
    pool: list[Team],
    rng: random.Random,
) -> list[Team]:
    """
    Decide the processing order of a pot during batch completion.

    When there are at least as many UEFA teams left as waiting groups with UEFA
    room, UEFA is the scarce resource: UEFA teams go first (shuffled), then the
    rest (shuffled). Otherwise the whole pool is shuffled at once.
    """
    uefa_teams = [team for team in pool if team.confederation == UEFA]
    critical_capacity = sum(
        1 for index in needy_group_indices(groups, pot_index)
        if has_uefa_room(groups[index])
    )

    if uefa_teams and len(uefa_teams) >= critical_capacity:
        others = [team for team in pool if team.confederation != UEFA]
        rng.shuffle(uefa_teams)
        rng.shuffle(others)
        return uefa_teams + others

    ordered = list(pool)
    rng.shuffle(ordered)
    return ordered


def choose_batch_group(
    groups: list[Group],
    pot_index: int,
    team: Team,
    unplaced: list[Team],
    rng: random.Random,
) -> Optional[int]:
    """
    Choose the group for one team during batch completion.

    Constraint levels count only ``unplaced`` teams of the round. Among the
    waiting groups that accept ``team``, the least flexible ones win and ties
    are broken at random.

    Returns:
        Group index, or None if no waiting group accepts the team
    """
    candidates = []
    for index in needy_group_indices(groups, pot_index):
        group = groups[index]
        if not is_valid_placement(group, team):
            continue
        level = len(valid_teams_for_group(group, unplaced))
        candidates.append((level, index))

    if not candidates:
        return None

    lowest = min(level for level, _ in candidates)
    return rng.choice([index for level, index in candidates if level == lowest])


def fill_pot(
    groups: list[Group],
    pot_index: int,
    pool: list[Team],
    rng: random.Random,
) -> list[Team]:
    """
    Seat every team of ``pool`` into ``groups`` (mutated in place).

    Returns:
        Teams that could not be placed anywhere
    """
    order = order_batch_pool(groups, pot_index, pool, rng)
    placed_ids: set[str] = set()
    failed: list[Team] = []

    for team in order:
        unplaced = [t for t in order if t.id not in placed_ids]
        group_index = choose_batch_group(groups, pot_index, team, unplaced, rng)
        if group_index is None:
            logger.error("Could not place team: %s", team.name)
            failed.append(team)
            continue
        groups[group_index].teams.append(team)
        placed_ids.add(team.id)

    return failed
