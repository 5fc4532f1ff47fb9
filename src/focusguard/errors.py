"""Exceptions raised by focusguard.

None of these is fatal to the process. Each one degrades a single feature
(app blocking, session history, settings persistence) while the timer keeps
counting.
"""


class FocusGuardError(Exception):
    """Base exception for all focusguard errors."""


class PermissionDenied(FocusGuardError):
    """Raised when the blocking gateway is not authorised to shield apps."""


class BlockingError(FocusGuardError):
    """Raised when a blocking gateway call fails."""


class PersistenceError(FocusGuardError):
    """Raised when a settings or history read/write fails."""
