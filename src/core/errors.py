"""
Error types shared by the scheduler, the bracket builder and the tournament store.
"""

INSUFFICIENT_TEAMS_MESSAGE = "Need at least 2 teams to generate a schedule for the day."
INVALID_COURT_COUNT_MESSAGE = "Must have at least one court."


class TournamentError(ValueError):
    """Base class for tournament validation errors."""


class ScheduleError(TournamentError):
    """Raised by the store when the day scheduler reports an error."""


class PlayoffSetupError(TournamentError):
    """Playoff selection (field size, byes, pairings) failed validation."""


class UnknownMatchError(TournamentError):
    pass


class InvalidWinnerError(TournamentError):
    pass


class TournamentNotFoundError(TournamentError):
    pass


class TeamNotFoundError(TournamentError):
    pass


class BracketConflictError(TournamentError):
    """A playoff result cannot change because later rounds depend on it."""
