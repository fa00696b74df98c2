"""Exception types shared by the staircase engine and its callers."""
from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a level table or staircase constant is malformed.

    These are set-up mistakes (an empty table, a pass threshold larger than the
    number of trials per level) and are reported when a session is created,
    never corrected silently.
    """


class InvalidStateError(RuntimeError):
    """Raised when a session is driven out of order.

    Typical causes are a response arriving after the session reached a terminal
    status, a late duplicate answer for a trial that has already been scored,
    or asking for a result before the test has finished.
    """


__all__ = ["ConfigurationError", "InvalidStateError"]
