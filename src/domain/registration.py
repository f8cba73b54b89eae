"""
Registration domain services - Invitation-gated account creation.

This module contains the core business logic of the registration gate:

- TokenVerificationService answers "does this token exist?" (read-only)
- RegistrationService creates an account and consumes the token
- InvitationService issues new tokens and delivers invite links

Token Lifecycle
===============

    issued (row in token store) -> consumed (row removed, account created)

Verification never mutates the store. Consumption happens only inside
the repository's create_account transaction, so a failed registration
leaves the token usable.
"""

import logging
import uuid
from dataclasses import dataclass
from urllib.parse import urlencode

import bcrypt

from .exceptions import InvalidAccountDetails, InvalidToken, RegistrationError, UsernameTaken
from .ports import AccountRepository, AccountResult, InviteSender, TokenRepository

logger = logging.getLogger(__name__)

MIN_BCRYPT_COST = 10
MAX_USERNAME_LENGTH = 150
# bcrypt only hashes the first 72 bytes and newer releases reject longer input
MAX_PASSWORD_BYTES = 72


@dataclass
class TokenVerificationService:
    """Domain service answering whether an invitation token exists."""

    repository: TokenRepository

    def verify(self, token: str) -> bool:
        """
        Check whether a token equal to the input exists in the store.

        No format constraint is applied; absence is reported as False,
        never as an error.
        """
        found = self.repository.find_token(token) is not None
        if not found:
            logger.info("Token verification miss")
        return found


@dataclass
class RegistrationService:
    """
    Domain service for account creation.

    Orchestrates username normalization, password hashing and the
    atomic consume-and-create call on the account repository.
    """

    repository: AccountRepository
    bcrypt_cost: int = MIN_BCRYPT_COST

    def register(self, username: str, password: str, token: str) -> str:
        """
        Create an account unlocked by an invitation token.

        Args:
            username: Requested username (will be stripped)
            password: Plaintext password (will be hashed)
            token: Invitation token value

        Returns:
            Normalized username

        Raises:
            InvalidToken: If the token is unknown or already consumed
            InvalidAccountDetails: If the username is blank or too long, or the
                password exceeds 72 bytes
            UsernameTaken: If the username is already registered
        """
        normalized_username = self._normalize_username(username)
        if not normalized_username or len(normalized_username) > MAX_USERNAME_LENGTH:
            raise InvalidAccountDetails("Username must be 1-150 characters")
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            raise InvalidAccountDetails("Password must be at most 72 bytes")
        password_hash = self._hash_password(password)

        result = self.repository.create_account(normalized_username, password_hash, token)

        if result == AccountResult.TOKEN_INVALID:
            raise InvalidToken(token)
        if result == AccountResult.USERNAME_TAKEN:
            raise UsernameTaken(normalized_username)

        logger.info("Account created: %s", normalized_username)
        return normalized_username

    def _normalize_username(self, username: str) -> str:
        return username.strip()

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt with cost factor >= 10."""
        rounds = max(self.bcrypt_cost, MIN_BCRYPT_COST)
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


@dataclass(frozen=True)
class Invitation:
    """An issued token together with the link that carries it."""

    token: str
    link: str


@dataclass
class InvitationService:
    """Domain service issuing invitation tokens."""

    repository: TokenRepository
    invite_sender: InviteSender
    invite_base_url: str

    def issue(self) -> Invitation:
        """
        Generate, store and deliver a fresh invitation token.

        Raises:
            RegistrationError: If the store already holds the generated value
        """
        token = str(uuid.uuid4())
        if not self.repository.add_token(token):
            raise RegistrationError(f"Token already exists: {token}")

        link = self._build_link(token)
        self.invite_sender.send_invite(token, link)
        return Invitation(token=token, link=link)

    def _build_link(self, token: str) -> str:
        separator = "&" if "?" in self.invite_base_url else "?"
        return f"{self.invite_base_url}{separator}{urlencode({'token': token})}"
