"""
Exception types for Birthder.

None of these are fatal to the bot: callers log them and degrade (no image, skip a
user, deny a privilege).
"""


class BirthderError(Exception):
    """Base class for errors raised by Birthder."""


class RetryError(BirthderError):
    """Raised when every attempt allowed by a RetryPolicy failed."""

    def __init__(self, message, attempts, last_error=None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class ImageProviderError(BirthderError):
    """The image provider could not return a usable image."""
