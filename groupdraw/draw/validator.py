"""Final-draw validation."""

import logging
from collections import Counter

from groupdraw.models import Group, UEFA, ValidationResult, Violation
from groupdraw.draw.constraints import MAX_UEFA_PER_GROUP, uefa_count

logger = logging.getLogger(__name__)

NO_UEFA_TEAM = "NoUefaTeam"
TOO_MANY_UEFA_TEAMS = "TooManyUefaTeams"
DUPLICATE_CONFEDERATION = "DuplicateConfederation"


def _group_violations(group: Group) -> list[Violation]:
    violations = []
    confederations = [team.confederation for team in group.teams]
    uefa = uefa_count(group)

    if uefa < 1:
        violations.append(Violation(
            group=group.name,
            kind=NO_UEFA_TEAM,
            message=f"Group {group.name}: No UEFA team (requires at least 1)",
        ))
    if uefa > MAX_UEFA_PER_GROUP:
        violations.append(Violation(
            group=group.name,
            kind=TOO_MANY_UEFA_TEAMS,
            message=(
                f"Group {group.name}: Too many UEFA teams "
                f"({uefa}, max is {MAX_UEFA_PER_GROUP})"
            ),
        ))

    counts = Counter(c for c in confederations if c != UEFA)
    duplicates = sorted(c for c, n in counts.items() if n > 1)
    if duplicates:
        violations.append(Violation(
            group=group.name,
            kind=DUPLICATE_CONFEDERATION,
            message=(
                f"Group {group.name}: Duplicate non-UEFA confederation "
                f"({', '.join(duplicates)})"
            ),
        ))
    return violations


def validate(groups: list[Group]) -> ValidationResult:
    """
    Check every group of a completed draw.

    Each group needs one or two UEFA members and no repeated non-UEFA
    confederation. All violations are reported, group by group.
    """
    violations = [v for group in groups for v in _group_violations(group)]
    return ValidationResult(
        valid=not violations,
        errors=[v.message for v in violations],
        violations=violations,
    )


def log_validation(result: ValidationResult) -> None:
    """Log the outcome of a final validation."""
    if result.valid:
        logger.info("Draw validation passed - all constraints satisfied")
        return
    logger.error("Draw validation failed with %d error(s)", len(result.errors))
    for error in result.errors:
        logger.error(error)
