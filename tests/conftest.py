"""
Shared test fixtures and configuration.

Provides reusable fixtures for all test files including database instances,
registries with known outcomes, seeded engines and sample draw data.
"""

import pytest
import os
import random
import shutil
import tempfile
from typing import Dict, Any, List
from unittest.mock import patch

from groupdraw.draw import DrawEngine, WORLD_CUP_2026
from groupdraw.draw.registry import Registry, make_team
from groupdraw.models import Group, UEFA
from groupdraw.storage import get_database, reset_database


def build_registry(confederations: List[List[str]], hosts=None) -> Registry:
    """Registry with one confederation list (12 entries) per pot."""
    pots = [
        tuple(
            make_team(f"P{pot}T{index:02d}", pot, confederation)
            for index, confederation in enumerate(entries)
        )
        for pot, entries in enumerate(confederations, start=1)
    ]
    return Registry(pots=pots, hosts=hosts)


def assert_group_invariants(groups: List[Group]) -> None:
    """Rules that must hold at every point of a draw."""
    for group in groups:
        assert len(group.teams) <= 4, f"Group {group.name} has {len(group.teams)} teams"

        pots = [team.pot for team in group.teams]
        assert len(pots) == len(set(pots)), f"Group {group.name} repeats a pot"

        confederations = [team.confederation for team in group.teams]
        assert confederations.count(UEFA) <= 2, f"Group {group.name} has too many UEFA teams"
        others = [c for c in confederations if c != UEFA]
        assert len(others) == len(set(others)), f"Group {group.name} repeats {others}"


# =============================================================================
# REGISTRY FIXTURES
# =============================================================================

@pytest.fixture
def safe_registry() -> Registry:
    """Every assignment is legal and every complete draw is valid."""
    return build_registry([
        ['UEFA'] * 12,
        ['CAF'] * 12,
        ['AFC'] * 12,
        ['CONMEBOL'] * 12,
    ], hosts={'P1T00-1': 0})


@pytest.fixture
def blocked_registry() -> Registry:
    """Pot 2 holds a CAF team that no group can take."""
    return build_registry([
        ['CAF'] * 12,
        ['AFC'] * 11 + ['CAF'],
        ['UEFA'] * 12,
        ['CONMEBOL'] * 12,
    ])


@pytest.fixture
def no_uefa_registry() -> Registry:
    """Every draw completes but no group gets a UEFA team."""
    return build_registry([
        ['CAF'] * 12,
        ['AFC'] * 12,
        ['CONMEBOL'] * 12,
        ['OFC'] * 12,
    ])


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def engine() -> DrawEngine:
    """World Cup engine with a fixed seed."""
    return DrawEngine(WORLD_CUP_2026, rng=random.Random(2026), max_attempts=500, strict=False)


@pytest.fixture
def safe_engine(safe_registry) -> DrawEngine:
    return DrawEngine(safe_registry, rng=random.Random(7), max_attempts=1, strict=False)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def test_data_dir():
    """Provide a temporary directory for test data."""
    temp_dir = tempfile.mkdtemp(prefix="groupdraw_test_")
    yield temp_dir

    # Cleanup
    if os.path.exists(temp_dir):
        try:
            shutil.rmtree(temp_dir)
        except PermissionError:
            pass  # Windows file locking, ignore


@pytest.fixture
def db_fixture(test_data_dir):
    """Provide a clean test database instance."""
    with patch.dict(os.environ, {'DB_TYPE': 'sqlite', 'DATA_DIR': test_data_dir}, clear=False):
        reset_database()
        db = get_database()
        yield db
        reset_database()  # Close connection before cleanup


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def finished_groups(safe_engine) -> List[Group]:
    """A complete, valid set of 12 groups."""
    session = safe_engine.complete_draw(safe_engine.start_draw())
    return session.groups


@pytest.fixture
def sample_draw_data(finished_groups) -> List[Dict[str, Any]]:
    """Finished groups in the shared JSON format."""
    return [group.model_dump(mode="json") for group in finished_groups]
