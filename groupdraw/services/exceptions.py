"""Errors raised by the draw service and its collaborators."""

from groupdraw.clients.gemini import CommentaryFailure


class ServiceError(Exception):
    """Base exception for service-level failures."""
    pass


class SessionNotFound(ServiceError):
    """No in-memory draw session has this id."""
    pass


class DrawNotFound(ServiceError):
    """No shared draw has this id."""
    pass


class PersistenceFailure(ServiceError):
    """Saving or fetching a shared draw failed."""
    pass


class DrawIncomplete(ServiceError):
    """The operation needs a finished draw."""
    pass


class GroupNotFound(ServiceError):
    """The draw has no group with this name."""
    pass


__all__ = [
    'ServiceError',
    'SessionNotFound',
    'DrawNotFound',
    'PersistenceFailure',
    'DrawIncomplete',
    'GroupNotFound',
    'CommentaryFailure',
]
