"""Tests for the confederation constraint checker."""

import pytest

from groupdraw.draw.constraints import (
    is_valid_placement,
    valid_teams_for_group,
    uefa_count,
    needy_group_indices,
)
from groupdraw.draw.registry import make_team
from groupdraw.models import Group


def group_of(*confederations):
    return Group(name="X", teams=[
        make_team(f"Member{i}", i + 1, c) for i, c in enumerate(confederations)
    ])


class TestIsValidPlacement:
    """Tests for is_valid_placement."""

    def test_empty_group_accepts_anyone(self):
        """An empty group accepts teams from every confederation."""
        group = Group(name="A")
        for confederation in ['UEFA', 'CAF', 'AFC', 'CONCACAF', 'CONMEBOL', 'OFC']:
            assert is_valid_placement(group, make_team("T", 1, confederation))

    def test_second_uefa_team_allowed(self):
        """A group may hold two UEFA teams."""
        assert is_valid_placement(group_of('UEFA'), make_team("T", 2, 'UEFA'))

    def test_third_uefa_team_rejected(self):
        """A third UEFA team is rejected."""
        assert not is_valid_placement(group_of('UEFA', 'UEFA'), make_team("T", 3, 'UEFA'))

    def test_duplicate_non_uefa_rejected(self):
        """Two teams from the same non-UEFA confederation are rejected."""
        assert not is_valid_placement(group_of('CAF'), make_team("T", 2, 'CAF'))

    def test_different_non_uefa_allowed(self):
        """Different non-UEFA confederations can share a group."""
        assert is_valid_placement(group_of('CAF', 'UEFA'), make_team("T", 3, 'AFC'))

    def test_uefa_members_do_not_block_non_uefa(self):
        """A full UEFA quota does not affect other confederations."""
        assert is_valid_placement(group_of('UEFA', 'UEFA'), make_team("T", 3, 'OFC'))

    def test_does_not_modify_group(self):
        """The check is a pure predicate."""
        group = group_of('UEFA')
        is_valid_placement(group, make_team("T", 2, 'UEFA'))
        assert len(group.teams) == 1


class TestHelpers:
    """Tests for the helper functions."""

    def test_uefa_count(self):
        assert uefa_count(group_of('UEFA', 'CAF', 'UEFA')) == 2
        assert uefa_count(Group(name="A")) == 0

    def test_valid_teams_for_group_keeps_order(self):
        """Valid teams come back in input order."""
        teams = [
            make_team("A", 2, 'CAF'),
            make_team("B", 2, 'AFC'),
            make_team("C", 2, 'UEFA'),
            make_team("D", 2, 'CAF'),
        ]
        result = valid_teams_for_group(group_of('CAF'), teams)
        assert [t.name for t in result] == ["B", "C"]

    @pytest.mark.parametrize("pot_index,expected", [(0, [0]), (1, [1, 3]), (2, [2])])
    def test_needy_group_indices(self, pot_index, expected):
        """Needy groups are those holding exactly pot_index teams."""
        groups = [
            Group(name="A"),
            group_of('CAF'),
            group_of('CAF', 'AFC'),
            group_of('UEFA'),
        ]
        assert needy_group_indices(groups, pot_index) == expected
