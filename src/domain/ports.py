"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


@dataclass(frozen=True)
class Token:
    """
    Invitation token record.

    The value is an opaque UUID string; existence in the store is the
    only fact the domain consults.
    """

    value: str
    created_at: datetime | None = None


class AccountResult(Enum):
    """
    Result of an account creation attempt.

    Used by create_account() to report the outcome without raising.
    """

    CREATED = "created"
    USERNAME_TAKEN = "username_taken"
    TOKEN_INVALID = "token_invalid"


class TokenRepository(Protocol):
    """Port interface for invitation token persistence."""

    def find_token(self, value: str) -> Token | None:
        """
        Look up the first token record whose value equals the input.

        Args:
            value: Token string exactly as submitted (no normalization)

        Returns:
            The matching Token, or None when absent
        """
        ...

    def add_token(self, value: str) -> bool:
        """
        Store a new invitation token.

        Args:
            value: UUID string

        Returns:
            True if stored, False if the value already exists
        """
        ...


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def create_account(self, username: str, password_hash: str, token: str) -> AccountResult:
        """
        Atomically consume a token and create the account it unlocks.

        Both steps happen in one transaction: either the token is removed
        and the account row exists, or nothing changes.

        Return values by scenario:
        - CREATED: token existed, username free, account stored
        - TOKEN_INVALID: token absent (never issued or already consumed)
        - USERNAME_TAKEN: token valid but username already registered

        Args:
            username: Normalized username
            password_hash: bcrypt hashed password
            token: Invitation token value

        Returns:
            AccountResult describing the outcome
        """
        ...


class InviteSender(Protocol):
    """Port interface for invitation delivery."""

    def send_invite(self, token: str, link: str) -> None:
        """
        Deliver an invitation link.

        Args:
            token: Issued token value
            link: Registration URL carrying the token as a query parameter
        """
        ...
