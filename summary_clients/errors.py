"""
Error types raised by the calendar summary clients.
"""


class SummaryError(Exception):
    """Base class for every failure the weekly summary job can report."""


class AuthError(SummaryError):
    """Credential, token, or mail session setup failed."""


class ConfigError(AuthError):
    """Required configuration is missing or invalid."""


class CalendarFetchError(SummaryError):
    """Reading events from the calendar provider failed."""


class DeliveryError(SummaryError):
    """The mail server rejected or failed to accept the message."""
