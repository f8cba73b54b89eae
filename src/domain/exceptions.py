"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class InvalidToken(RegistrationError):
    """Invitation token is unknown or has already been consumed."""

    pass


class UsernameTaken(RegistrationError):
    """Username belongs to an existing account."""

    pass


class InvalidAccountDetails(RegistrationError):
    """Username or password cannot be stored (blank username, over-long password)."""

    pass
