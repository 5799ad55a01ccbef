"""
Group draw core.

Usage:
    from groupdraw.draw import DrawEngine, validate

    engine = DrawEngine()
    session = engine.start_draw()
    engine.complete_draw(session)
    result = validate(session.groups)
"""

from .registry import Registry, WORLD_CUP_2026, GROUP_NAMES, TOTAL_GROUPS
from .constraints import is_valid_placement, valid_teams_for_group, uefa_count
from .validator import validate
from .engine import DrawEngine
from .exceptions import (
    DrawError,
    PlacementDeadEnd,
    UnplaceableTeam,
    InvalidExternalDraw,
    DrawFinished,
    DrawStepPending,
    InvalidCommit,
    DrawValidationFailed,
)

__all__ = [
    'Registry',
    'WORLD_CUP_2026',
    'GROUP_NAMES',
    'TOTAL_GROUPS',
    'is_valid_placement',
    'valid_teams_for_group',
    'uefa_count',
    'validate',
    'DrawEngine',
    'DrawError',
    'PlacementDeadEnd',
    'UnplaceableTeam',
    'InvalidExternalDraw',
    'DrawFinished',
    'DrawStepPending',
    'InvalidCommit',
    'DrawValidationFailed',
]
