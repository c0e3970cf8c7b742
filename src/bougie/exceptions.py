"""
Exception types raised by Bougie collaborators.

The recognition core never raises for data conditions; these are used by
the loading layer and surfaced by the CLI.
"""


class BougieError(Exception):
    """Base class for all Bougie errors."""


class DataLoadError(BougieError):
    """Raised when bar data cannot be read from its source."""

    def __init__(self, message: str, path: str = None):
        self.path = path
        if path:
            message = f"{message} ({path})"
        super().__init__(message)
