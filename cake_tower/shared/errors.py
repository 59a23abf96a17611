# shared/errors.py


class CakeTowerError(Exception):
    """Base class for recoverable game errors."""


class ValidationError(CakeTowerError):
    """User input rejected; the message is shown to the player as-is."""


class PersistenceReadError(CakeTowerError):
    """A locally stored value is missing or malformed."""


class RemoteUnavailableError(CakeTowerError):
    """The leaderboard server could not be reached or answered with an error."""
