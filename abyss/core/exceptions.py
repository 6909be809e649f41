"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class AbyssError(Exception):
    """Base exception for abyss."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NoDataError(AbyssError):
    """Nothing stored for the requested record."""

    pass


class SessionNotReadyError(AbyssError):
    """Session manager used before (or re-entered) hydration."""

    pass


class ExchangeInFlightError(AbyssError):
    """A message is already awaiting the agent's reply."""

    pass


class ArchiveUnreadableError(AbyssError):
    """A stored archive exists but cannot be parsed; it must not be overwritten."""

    pass


class ExportFailedError(AbyssError):
    """Stored archive could not be turned into an export."""

    pass
