"""
Exceptions raised by the draw engine.

- DrawError: Base exception for all draw errors
- PlacementDeadEnd: Stepwise selection found no legal team for a group
- UnplaceableTeam: Batch completion could not seat a team (strict mode)
- InvalidExternalDraw: Loaded draw data is not a 12-group structure
- DrawFinished: Mutation requested on a finished draw
- DrawStepPending: A selected team is still waiting to be committed
- InvalidCommit: Commit request does not describe a legal placement
- DrawValidationFailed: Batch completion never produced a valid draw (strict mode)
"""


class DrawError(Exception):
    """Base exception for all draw errors."""
    pass


class PlacementDeadEnd(DrawError):
    """No remaining team can legally join the most constrained group."""

    def __init__(self, message: str, group_index: int = -1):
        super().__init__(message)
        self.group_index = group_index


class UnplaceableTeam(DrawError):
    """Batch completion left teams without a legal group."""

    def __init__(self, message: str, teams=None):
        super().__init__(message)
        self.teams = list(teams or [])


class InvalidExternalDraw(DrawError):
    """Loaded draw data is malformed."""
    pass


class DrawFinished(DrawError):
    """The draw is complete; no further placements are possible."""
    pass


class DrawStepPending(DrawError):
    """A drawn team has not been committed or cancelled yet."""
    pass


class InvalidCommit(DrawError):
    """The requested placement is not legal in the current state."""
    pass


class DrawValidationFailed(DrawError):
    """Batch completion only produced draws that fail validation (strict mode)."""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = list(errors or [])
