"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for invitation-gated
registration. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import InvalidAccountDetails, InvalidToken, RegistrationError, UsernameTaken
from .ports import AccountRepository, AccountResult, InviteSender, Token, TokenRepository
from .registration import (
    Invitation,
    InvitationService,
    RegistrationService,
    TokenVerificationService,
)

__all__ = [
    "AccountRepository",
    "AccountResult",
    "InvalidAccountDetails",
    "InvalidToken",
    "Invitation",
    "InvitationService",
    "InviteSender",
    "RegistrationError",
    "RegistrationService",
    "Token",
    "TokenRepository",
    "TokenVerificationService",
    "UsernameTaken",
]
