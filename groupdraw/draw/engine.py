"""
Draw engine.

Owns every mutation of a DrawSession. Two protocols fill the groups:

- Stepwise: ``draw_next`` selects a (team, group) pair and parks it on the
  session as pending; ``commit`` seats it. The gap between the two calls is
  where a presentation layer can animate the reveal.
- Batch: ``complete_draw`` runs every remaining pot to completion at once.
"""

import logging
import random
from typing import Any, Optional

from pydantic import ValidationError

from groupdraw import config
from groupdraw.models import Team, Group, DrawSession, Placement, ValidationResult
from groupdraw.models.draw import FINISHED_POT_INDEX
from groupdraw.draw.registry import Registry, WORLD_CUP_2026
from groupdraw.draw.constraints import is_valid_placement
from groupdraw.draw.selector import select_stepwise, fill_pot
from groupdraw.draw.validator import validate, log_validation
from groupdraw.draw.exceptions import (
    DrawFinished,
    DrawStepPending,
    InvalidCommit,
    InvalidExternalDraw,
    UnplaceableTeam,
    DrawValidationFailed,
)

logger = logging.getLogger(__name__)

MAX_GROUP_SIZE = 4


class DrawEngine:
    """
    Runs draws over a registry.

    Args:
        registry: Pots, group names and host placements
        rng: Random source (defaults to one seeded with DRAW_SEED)
        max_attempts: Batch attempts before giving up (default DRAW_MAX_ATTEMPTS)
        strict: Raise instead of committing a failed batch (default DRAW_STRICT)
    """

    def __init__(
        self,
        registry: Registry = WORLD_CUP_2026,
        rng: Optional[random.Random] = None,
        max_attempts: Optional[int] = None,
        strict: Optional[bool] = None,
    ):
        self.registry = registry
        self.rng = rng or random.Random(config.DRAW_SEED)
        if max_attempts is None:
            max_attempts = config.DRAW_MAX_ATTEMPTS
        self.max_attempts = max(1, max_attempts)
        self.strict = config.DRAW_STRICT if strict is None else strict

    # =========================================================================
    # SESSION LIFECYCLE
    # =========================================================================

    def start_draw(self) -> DrawSession:
        """Create a fresh session with the hosts already seated."""
        session = DrawSession(groups=[])
        self._initialize(session)
        return session

    def reset(self, session: DrawSession) -> DrawSession:
        """Restore a session to the fresh state, keeping its id."""
        self._initialize(session)
        session.shared_id = None
        return session

    def _initialize(self, session: DrawSession) -> None:
        groups = self.registry.empty_groups()
        for team, group_index in self.registry.host_placements():
            groups[group_index].teams.append(team)

        session.groups = groups
        session.pot_index = 0
        session.pending = None
        session.unplaced = []
        self._refresh_remaining(session)

    def _refresh_remaining(self, session: DrawSession) -> None:
        if session.is_finished:
            session.remaining = []
            return
        placed = {team.id for team in session.placed_teams()}
        session.remaining = [
            team for team in self.registry.pots[session.pot_index]
            if team.id not in placed
        ]

    def _advance_pot(self, session: DrawSession) -> None:
        session.pot_index += 1
        self._refresh_remaining(session)
        if session.is_finished:
            logger.info("Draw %s finished", session.id)
            log_validation(validate(session.groups))
        else:
            logger.debug("Draw %s moved to pot %d", session.id, session.pot_number)

    # =========================================================================
    # STEPWISE PROTOCOL
    # =========================================================================

    def draw_next(self, session: DrawSession) -> Optional[Placement]:
        """
        Select the next team and its group without seating it.

        Returns:
            The pending placement, or None if the session is finished or the
            call only moved past an exhausted pot

        Raises:
            DrawStepPending: A previous selection is still uncommitted
            PlacementDeadEnd: The most constrained group has no legal team
        """
        if session.is_finished:
            return None
        if session.pending is not None:
            raise DrawStepPending(
                f"{session.pending.team.name} is still waiting to be placed"
            )

        if not session.remaining:
            self._advance_pot(session)
            return None

        placement = select_stepwise(
            session.groups, session.pot_index, session.remaining, self.rng
        )
        session.pending = placement
        logger.debug(
            "Drew %s for group %s",
            placement.team.name, session.groups[placement.group_index].name
        )
        return placement

    def commit(self, session: DrawSession, team: Team, group_index: int) -> DrawSession:
        """
        Seat a drawn team in its group.

        When a placement is pending only that placement is accepted. The
        active pot advances once its last team is seated.

        Raises:
            DrawFinished: The session is already finished
            InvalidCommit: The placement is not legal; nothing is changed
        """
        if session.is_finished:
            raise DrawFinished("The draw is already complete")

        pending = session.pending
        if pending is not None and (
            pending.team != team or pending.group_index != group_index
        ):
            raise InvalidCommit(
                f"Pending placement is {pending.team.name} -> "
                f"group {session.groups[pending.group_index].name}"
            )

        self._check_placement(session, team, group_index)

        session.groups[group_index].teams.append(team)
        session.remaining = [t for t in session.remaining if t.id != team.id]
        session.pending = None

        if not session.remaining:
            self._advance_pot(session)
        return session

    def commit_pending(self, session: DrawSession) -> DrawSession:
        """Commit the placement selected by the last ``draw_next``."""
        if session.pending is None:
            raise InvalidCommit("No drawn team is waiting to be placed")
        return self.commit(session, session.pending.team, session.pending.group_index)

    def cancel_pending(self, session: DrawSession) -> Optional[Placement]:
        """Discard an uncommitted selection. Returns what was discarded."""
        pending, session.pending = session.pending, None
        return pending

    def _check_placement(self, session: DrawSession, team: Team, group_index: int) -> None:
        if not any(t.id == team.id for t in session.remaining):
            raise InvalidCommit(f"{team.name} is not available in pot {session.pot_number}")
        if not 0 <= group_index < len(session.groups):
            raise InvalidCommit(f"Group index out of range: {group_index}")

        group = session.groups[group_index]
        if len(group.teams) != session.pot_index:
            raise InvalidCommit(
                f"Group {group.name} is not waiting for a pot {session.pot_number} team"
            )
        if not is_valid_placement(group, team):
            raise InvalidCommit(
                f"{team.name} ({team.confederation}) cannot join group {group.name}"
            )

    # =========================================================================
    # BATCH PROTOCOL
    # =========================================================================

    def complete_draw(self, session: DrawSession) -> DrawSession:
        """
        Fill every remaining pot at once.

        Each attempt starts from the current groups. The first attempt that
        seats every team and passes validation is kept. If none does, the last
        attempt is kept with its unplaced teams recorded on the session, or,
        in strict mode, an error is raised and the session is left untouched.
        A finished session is returned unchanged.

        Raises:
            UnplaceableTeam: Strict mode, teams could not be seated
            DrawValidationFailed: Strict mode, every attempt broke a group rule
        """
        if session.is_finished:
            return session

        groups: list[Group] = []
        unplaced: list[Team] = []
        result: Optional[ValidationResult] = None

        for attempt in range(1, self.max_attempts + 1):
            groups = [group.clone() for group in session.groups]
            unplaced = []
            for pot_index in range(session.pot_index, FINISHED_POT_INDEX):
                placed = {team.id for group in groups for team in group.teams}
                pool = [t for t in self.registry.pots[pot_index] if t.id not in placed]
                unplaced.extend(fill_pot(groups, pot_index, pool, self.rng))

            result = validate(groups)
            if not unplaced and result.valid:
                if attempt > 1:
                    logger.info("Batch draw succeeded on attempt %d", attempt)
                break
            logger.debug(
                "Batch attempt %d failed: %d unplaced, %d violations",
                attempt, len(unplaced), len(result.errors)
            )

        if self.strict and unplaced:
            raise UnplaceableTeam(
                f"Could not place {', '.join(t.name for t in unplaced)} "
                f"after {self.max_attempts} attempt(s)",
                teams=unplaced,
            )
        if self.strict and result is not None and not result.valid:
            raise DrawValidationFailed(
                f"No valid draw after {self.max_attempts} attempt(s)",
                errors=result.errors,
            )

        session.groups = groups
        session.unplaced = unplaced
        session.pending = None
        session.pot_index = FINISHED_POT_INDEX
        session.remaining = []

        if unplaced:
            logger.error(
                "Draw %s finished with %d unplaced team(s): %s",
                session.id, len(unplaced), ', '.join(t.name for t in unplaced)
            )
        if result is not None:
            log_validation(result)
        return session

    # =========================================================================
    # EXTERNAL DRAWS
    # =========================================================================

    def load_external_draw(self, data: Any) -> DrawSession:
        """
        Build a finished session from previously saved group data.

        Args:
            data: List of group entries ``{"name": ..., "teams": [...]}``

        Raises:
            InvalidExternalDraw: Not exactly one entry per group, or an entry
                is malformed or holds more than four teams
        """
        expected = self.registry.group_count
        if not isinstance(data, list) or len(data) != expected:
            size = len(data) if isinstance(data, list) else type(data).__name__
            raise InvalidExternalDraw(f"Expected {expected} groups, got {size}")

        try:
            groups = [
                entry if isinstance(entry, Group) else Group.model_validate(entry)
                for entry in data
            ]
        except ValidationError as e:
            raise InvalidExternalDraw(f"Malformed group data: {e}") from e

        for group in groups:
            if len(group.teams) > MAX_GROUP_SIZE:
                raise InvalidExternalDraw(
                    f"Group {group.name} has {len(group.teams)} teams "
                    f"(max {MAX_GROUP_SIZE})"
                )

        session = DrawSession(groups=[g.clone() for g in groups], pot_index=FINISHED_POT_INDEX)
        log_validation(validate(session.groups))
        return session

    def validate_session(self, session: DrawSession) -> ValidationResult:
        """Validate the groups of a session."""
        return validate(session.groups)
