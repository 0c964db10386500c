"""
Exception types for the token replay engine.

Every error is recoverable at the controller boundary: the controller keeps
the message of the last one as its single current error.
"""

from typing import Optional


class TokenflowError(Exception):
    """Base class for all engine errors."""
    pass


class FileFormatError(TokenflowError):
    """Raised when a trace log is malformed or misses a required column/key."""
    pass


class EmptyTraceError(FileFormatError):
    """Raised when a trace log has no non-blank line."""
    pass


class ModelStructureError(TokenflowError):
    """Raised when an imported model document does not have the net structure."""
    pass


class ArcEndpointError(TokenflowError):
    """Raised when an arc does not connect exactly one place and one transition."""
    pass


class IntegrityError(TokenflowError):
    """Raised when the net references unknown nodes or reuses identifiers."""
    pass


class NodeNotFoundError(TokenflowError, LookupError):
    """Raised when an edit addresses a node or arc id that does not exist."""
    pass


class ReplayError(TokenflowError):
    """
    Base for errors raised while firing a trace event.

    Fields:
        step: 1-based position of the event in the active trace
        activity: Activity label of the event
    """

    def __init__(self, message: str, step: Optional[int] = None, activity: Optional[str] = None) -> None:
        super().__init__(message)
        self.step = step
        self.activity = activity


class TransitionNotFoundError(ReplayError):
    """Raised when no transition carries the activity label of a trace event."""
    pass


class TransitionNotEnabledError(ReplayError):
    """Raised when a transition lacks a token on one of its input places."""
    pass


class TokenUnderflowError(ReplayError):
    """Raised when reversing a firing would drive a place below zero tokens."""
    pass
