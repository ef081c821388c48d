"""
Domain-specific exception hierarchy for studiopost.
"""


class StudioPostError(Exception):
    """Base class for all application-level errors."""


class MalformedIntervalError(StudioPostError, ValueError):
    """Raised when an interval does not satisfy start < end."""


class CalendarAPIError(StudioPostError):
    """Raised when calendar data cannot be fetched or parsed."""


class AuthenticationError(StudioPostError):
    """Raised when authentication or token handling fails."""
