"""
Error taxonomy for the availability and booking core.

Raised by the resolver, data sources, recovery protocol and submission
pipeline; caught by the wizard and the calendar for user-facing handling.
"""

from typing import Optional


class BookingError(Exception):
    """Base exception for all availability and booking errors."""


class ConfigurationError(BookingError):
    """Raised when package data is missing or malformed. Never retried."""


class ValidationError(BookingError):
    """Raised when form state fails a step's validation gate."""

    def __init__(self, errors: list[str], message: Optional[str] = None) -> None:
        self.errors = list(errors)
        super().__init__(message or ", ".join(self.errors) or "Validation failed")


class AuthenticationRequired(BookingError):
    """Raised when a guest reaches a step that requires a signed-in user."""


class SessionExpired(BookingError):
    """Raised when authentication lapses while a submission is in flight."""


class TransportError(BookingError):
    """Raised on network or server failure. Safe to retry."""


class StaleDataDiscarded(BookingError):
    """Raised internally when an out-of-order availability response is dropped."""
