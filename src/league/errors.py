"""
Exceptions raised by the league core.
"""


class LeagueError(Exception):
    """Base class for all league errors."""


class ValidationError(LeagueError):
    """Malformed team or match input."""


class InfeasibleScheduleError(LeagueError):
    """No complete, fair schedule could be produced within the retry budget."""

    def __init__(self, message, attempts=0, unscheduled=0):
        super().__init__(message)
        self.attempts = attempts
        self.unscheduled = unscheduled


class TransientStoreError(LeagueError):
    """The persistence gateway failed to read or write."""


class StaleStateWarning(UserWarning):
    """A bracket slot was already taken by another team; nothing was overwritten."""


class UnknownRecordError(ValidationError):
    """A referenced match or team does not exist."""
