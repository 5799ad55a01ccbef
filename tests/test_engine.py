"""Tests for the draw engine."""

import random
from unittest.mock import patch

import pytest

from groupdraw import config
from groupdraw.draw import (
    DrawEngine,
    WORLD_CUP_2026,
    PlacementDeadEnd,
    UnplaceableTeam,
    InvalidExternalDraw,
    DrawFinished,
    DrawStepPending,
    InvalidCommit,
    DrawValidationFailed,
    validate,
)
from groupdraw.draw.validator import NO_UEFA_TEAM
from conftest import assert_group_invariants


def assert_pot_order(groups):
    """Position i of every group holds a pot i+1 team."""
    for group in groups:
        assert [team.pot for team in group.teams] == list(range(1, len(group.teams) + 1))


def run_stepwise(engine, session):
    """Draw and commit until the session finishes."""
    while not session.is_finished:
        placement = engine.draw_next(session)
        if placement is not None:
            engine.commit_pending(session)
    return session


class TestEngineSettings:
    """Tests for engine construction."""

    def test_attempts_default_from_config(self):
        with patch.object(config, 'DRAW_MAX_ATTEMPTS', 37):
            assert DrawEngine().max_attempts == 37

    def test_zero_attempts_means_one_pass(self):
        """An explicit zero is not mistaken for unset."""
        with patch.object(config, 'DRAW_MAX_ATTEMPTS', 200):
            assert DrawEngine(max_attempts=0).max_attempts == 1

    def test_strict_default_from_config(self):
        with patch.object(config, 'DRAW_STRICT', True):
            assert DrawEngine().strict is True
        assert DrawEngine(strict=False).strict is False


class TestStartDraw:
    """Tests for session creation."""

    def test_hosts_are_seated(self, engine):
        """Mexico opens group A, Canada group B and the USA group D."""
        session = engine.start_draw()

        assert session.groups[0].teams[0].name == "Mexico (Host)"
        assert session.groups[1].teams[0].name == "Canada (Host)"
        assert session.groups[3].teams[0].name == "USA (Host)"
        assert len(session.placed_teams()) == 3

    def test_fresh_state(self, engine):
        """Pot 1 is active with the nine non-host teams remaining."""
        session = engine.start_draw()

        assert [g.name for g in session.groups] == list("ABCDEFGHIJKL")
        assert session.pot_index == 0
        assert session.pot_number == 1
        assert len(session.remaining) == 9
        assert all("Host" not in team.name for team in session.remaining)
        assert session.pending is None
        assert session.is_finished is False

    def test_sessions_are_independent(self, engine):
        """Two sessions never share group lists."""
        first = engine.start_draw()
        second = engine.start_draw()

        engine.draw_next(first)
        engine.commit_pending(first)

        assert first.id != second.id
        assert len(first.placed_teams()) == 4
        assert len(second.placed_teams()) == 3


class TestDrawNext:
    """Tests for stepwise selection on a session."""

    def test_first_selection_goes_to_group_c(self, engine):
        """All empty groups tie; the first of them, C, is served."""
        session = engine.start_draw()

        placement = engine.draw_next(session)

        assert placement.group_index == 2
        assert placement.team in session.remaining
        assert session.pending == placement

    def test_selection_does_not_place(self, engine):
        """The drawn team stays out of the groups until committed."""
        session = engine.start_draw()

        placement = engine.draw_next(session)

        assert placement.team not in session.placed_teams()
        assert len(session.remaining) == 9

    def test_pending_blocks_next_selection(self, engine):
        """A second draw before committing is refused."""
        session = engine.start_draw()
        engine.draw_next(session)

        with pytest.raises(DrawStepPending):
            engine.draw_next(session)

    def test_cancel_pending(self, engine):
        """Cancelling discards the selection and unblocks drawing."""
        session = engine.start_draw()
        placement = engine.draw_next(session)

        assert engine.cancel_pending(session) == placement
        assert session.pending is None
        assert engine.cancel_pending(session) is None
        assert engine.draw_next(session) is not None

    def test_exhausted_pot_only_advances(self, engine):
        """With nothing left in the pot the call advances and returns None."""
        session = engine.start_draw()
        session.remaining = []

        assert engine.draw_next(session) is None
        assert session.pot_index == 1
        assert len(session.remaining) == 12

    def test_finished_session_returns_none(self, safe_engine):
        session = run_stepwise(safe_engine, safe_engine.start_draw())

        assert safe_engine.draw_next(session) is None


class TestCommit:
    """Tests for commits."""

    def test_commit_pending(self, engine):
        """The drawn team lands in its group and leaves the pot."""
        session = engine.start_draw()
        placement = engine.draw_next(session)

        engine.commit_pending(session)

        assert session.groups[placement.group_index].teams == [placement.team]
        assert placement.team not in session.remaining
        assert session.pending is None

    def test_commit_must_match_pending(self, engine):
        """Only the pending placement can be committed."""
        session = engine.start_draw()
        placement = engine.draw_next(session)
        other = next(t for t in session.remaining if t != placement.team)

        with pytest.raises(InvalidCommit):
            engine.commit(session, other, placement.group_index)
        with pytest.raises(InvalidCommit):
            engine.commit(session, placement.team, placement.group_index + 1)

        assert session.pending == placement
        assert len(session.placed_teams()) == 3

    def test_commit_pending_without_selection(self, engine):
        with pytest.raises(InvalidCommit):
            engine.commit_pending(engine.start_draw())

    def test_explicit_commit(self, engine):
        """Without a pending selection any legal placement is accepted."""
        session = engine.start_draw()
        spain = WORLD_CUP_2026.team("Spain-1")

        engine.commit(session, spain, 11)

        assert session.groups[11].teams == [spain]
        assert spain not in session.remaining

    @pytest.mark.parametrize("team_id,group_index", [
        ("Mexico (Host)-1", 2),   # already placed
        ("Croatia-2", 2),         # wrong pot
        ("Spain-1", 0),           # group already holds a pot 1 team
        ("Spain-1", 12),          # no such group
        ("Spain-1", -1),
    ])
    def test_illegal_commit_changes_nothing(self, engine, team_id, group_index):
        session = engine.start_draw()

        with pytest.raises(InvalidCommit):
            engine.commit(session, WORLD_CUP_2026.team(team_id), group_index)

        assert len(session.placed_teams()) == 3
        assert len(session.remaining) == 9

    def test_confederation_clash_rejected(self, blocked_registry):
        """A team is never seated next to a confederation rival."""
        engine = DrawEngine(blocked_registry, rng=random.Random(0))
        session = engine.start_draw()
        for _ in range(12):
            engine.draw_next(session)
            engine.commit_pending(session)
        assert session.pot_index == 1

        with pytest.raises(InvalidCommit):
            engine.commit(session, blocked_registry.team("P2T11-2"), 0)
        assert len(session.groups[0].teams) == 1

    def test_last_commit_advances_pot(self, safe_engine):
        """Seating the last team of a pot opens the next one."""
        session = safe_engine.start_draw()
        for _ in range(11):
            safe_engine.draw_next(session)
            safe_engine.commit_pending(session)

        assert session.pot_index == 1
        assert len(session.remaining) == 12

    def test_commit_after_finish(self, safe_engine, safe_registry):
        session = run_stepwise(safe_engine, safe_engine.start_draw())

        with pytest.raises(DrawFinished):
            safe_engine.commit(session, safe_registry.team("P1T01-1"), 0)


class TestStepwiseDraw:
    """Tests for full stepwise draws."""

    @pytest.mark.parametrize("seed", range(20))
    def test_world_cup_rules_hold_at_every_step(self, seed):
        """Every intermediate state respects the group rules."""
        engine = DrawEngine(WORLD_CUP_2026, rng=random.Random(seed))
        session = engine.start_draw()

        try:
            while not session.is_finished:
                placement = engine.draw_next(session)
                if placement is None:
                    continue
                assert placement.team in session.remaining
                assert len(session.groups[placement.group_index].teams) == session.pot_index
                engine.commit_pending(session)
                assert_group_invariants(session.groups)
                assert_pot_order(session.groups)
        except PlacementDeadEnd:
            assert not session.is_finished

        if session.is_finished:
            assert len(session.placed_teams()) == 48

    @pytest.mark.parametrize("seed", range(5))
    def test_safe_registry_produces_valid_draw(self, safe_registry, seed):
        engine = DrawEngine(safe_registry, rng=random.Random(seed))
        session = run_stepwise(engine, engine.start_draw())

        assert validate(session.groups).valid
        assert sorted(t.id for t in session.placed_teams()) == \
            sorted(t.id for t in safe_registry.all_teams())
        assert session.groups[0].teams[0].id == "P1T00-1"
        assert session.remaining == []
        assert session.pot_number is None

    def test_dead_end(self, blocked_registry):
        """The CAF team of pot 2 cannot join any CAF-led group."""
        engine = DrawEngine(blocked_registry, rng=random.Random(0))
        session = engine.start_draw()

        with pytest.raises(PlacementDeadEnd) as exc_info:
            run_stepwise(engine, session)

        assert exc_info.value.group_index == 11
        assert session.pot_index == 1
        assert [t.id for t in session.remaining] == ["P2T11-2"]


class TestCompleteDraw:
    """Tests for batch completion."""

    def test_world_cup_from_start(self, engine):
        """An immediate completion seats all 48 teams in valid groups."""
        session = engine.complete_draw(engine.start_draw())

        assert session.is_finished
        assert session.unplaced == []
        assert all(len(g.teams) == 4 for g in session.groups)
        assert sorted(t.id for t in session.placed_teams()) == \
            sorted(t.id for t in WORLD_CUP_2026.all_teams())
        assert_group_invariants(session.groups)
        assert_pot_order(session.groups)
        assert validate(session.groups).valid

    def test_hosts_keep_their_groups(self, engine):
        session = engine.complete_draw(engine.start_draw())

        assert session.groups[0].teams[0].id == "Mexico (Host)-1"
        assert session.groups[1].teams[0].id == "Canada (Host)-1"
        assert session.groups[3].teams[0].id == "USA (Host)-1"

    def test_completion_keeps_earlier_placements(self, engine):
        """Teams committed stepwise stay where they were placed."""
        session = engine.start_draw()
        for _ in range(4):
            engine.draw_next(session)
            engine.commit_pending(session)
        before = [list(g.teams) for g in session.groups]

        engine.complete_draw(session)

        for group, teams in zip(session.groups, before):
            assert group.teams[:len(teams)] == teams
        assert len(session.placed_teams()) == 48

    def test_clears_pending(self, engine):
        session = engine.start_draw()
        engine.draw_next(session)

        engine.complete_draw(session)

        assert session.pending is None
        assert session.remaining == []

    def test_finished_session_unchanged(self, engine):
        """Completing twice is a no-op."""
        session = engine.complete_draw(engine.start_draw())
        groups = session.groups

        assert engine.complete_draw(session) is session
        assert session.groups is groups

    def test_unplaceable_team_strict(self, blocked_registry):
        """Strict mode raises and leaves the session untouched."""
        engine = DrawEngine(blocked_registry, rng=random.Random(0), max_attempts=3, strict=True)
        session = engine.start_draw()

        with pytest.raises(UnplaceableTeam) as exc_info:
            engine.complete_draw(session)

        assert "P2T11-2" in [t.id for t in exc_info.value.teams]
        assert session.pot_index == 0
        assert session.placed_teams() == []
        assert session.unplaced == []

    def test_unplaceable_team_lenient(self, blocked_registry):
        """Without strict mode the short draw is kept and reported."""
        engine = DrawEngine(blocked_registry, rng=random.Random(0), max_attempts=2, strict=False)
        session = engine.complete_draw(engine.start_draw())

        assert session.is_finished
        # The short group also misses its pot 3 and pot 4 teams
        assert len(session.unplaced) == 3
        assert "P2T11-2" in [t.id for t in session.unplaced]
        assert sorted(len(g.teams) for g in session.groups)[0] == 1
        assert not validate(session.groups).valid

    def test_validation_failure_strict(self, no_uefa_registry):
        engine = DrawEngine(no_uefa_registry, rng=random.Random(0), max_attempts=2, strict=True)
        session = engine.start_draw()

        with pytest.raises(DrawValidationFailed) as exc_info:
            engine.complete_draw(session)

        assert len(exc_info.value.errors) == 12
        assert session.pot_index == 0

    def test_validation_failure_lenient(self, no_uefa_registry):
        """A complete but invalid draw is kept when not strict."""
        engine = DrawEngine(no_uefa_registry, rng=random.Random(0), max_attempts=2, strict=False)
        session = engine.complete_draw(engine.start_draw())

        result = engine.validate_session(session)
        assert session.is_finished
        assert session.unplaced == []
        assert {v.kind for v in result.violations} == {NO_UEFA_TEAM}


class TestLoadExternalDraw:
    """Tests for loading saved draws."""

    def test_load_saved_groups(self, safe_engine, sample_draw_data):
        session = safe_engine.load_external_draw(sample_draw_data)

        assert session.is_finished
        assert session.groups_data() == sample_draw_data
        assert session.remaining == []

    def test_rule_breaking_draw_is_loaded(self, engine):
        """Loading checks the structure only."""
        data = [{"name": name, "teams": []} for name in "ABCDEFGHIJKL"]

        session = engine.load_external_draw(data)

        assert not engine.validate_session(session).valid

    def test_wrong_group_count(self, safe_engine, sample_draw_data):
        with pytest.raises(InvalidExternalDraw):
            safe_engine.load_external_draw(sample_draw_data[:11])

    def test_too_many_teams(self, safe_engine, sample_draw_data):
        sample_draw_data[0]["teams"].append(sample_draw_data[1]["teams"][0])

        with pytest.raises(InvalidExternalDraw):
            safe_engine.load_external_draw(sample_draw_data)

    @pytest.mark.parametrize("data", [
        None,
        "groups",
        {"groups": []},
        [{"name": "A", "teams": "none"}] * 12,
        [{"teams": []}] * 12,
    ])
    def test_malformed_data(self, engine, data):
        with pytest.raises(InvalidExternalDraw):
            engine.load_external_draw(data)


class TestReset:
    """Tests for reset."""

    def test_reset_restores_fresh_state(self, engine):
        session = engine.complete_draw(engine.start_draw())
        session.shared_id = "abcdefgh"
        session_id = session.id

        engine.reset(session)

        assert session.id == session_id
        assert session.shared_id is None
        assert session.pot_index == 0
        assert len(session.placed_teams()) == 3
        assert len(session.remaining) == 9
        assert session.unplaced == []
