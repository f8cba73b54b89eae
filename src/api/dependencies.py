"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresAccountRepository, PostgresTokenRepository
from src.adapters.smtp.console import ConsoleInviteSender
from src.config.settings import Settings, get_settings
from src.domain.registration import (
    InvitationService,
    RegistrationService,
    TokenVerificationService,
)

# Module-level singleton - ConsoleInviteSender is stateless
_invite_sender = ConsoleInviteSender()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_token_repository(request: Request) -> PostgresTokenRepository:
    """Create token repository with connection pool from app state."""
    return PostgresTokenRepository(get_pool(request))


def get_account_repository(request: Request) -> PostgresAccountRepository:
    """Create account repository with connection pool from app state."""
    return PostgresAccountRepository(get_pool(request))


def get_invite_sender() -> ConsoleInviteSender:
    """Get console invite sender (singleton)."""
    return _invite_sender


def get_verification_service(request: Request) -> TokenVerificationService:
    return TokenVerificationService(repository=get_token_repository(request))


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    The bcrypt cost is taken from settings.
    """
    settings = get_settings()
    return RegistrationService(
        repository=get_account_repository(request),
        bcrypt_cost=settings.bcrypt_cost,
    )


def get_invitation_service(request: Request) -> InvitationService:
    """Create invitation service wired to the token store and console sender."""
    settings = get_settings()
    return InvitationService(
        repository=get_token_repository(request),
        invite_sender=get_invite_sender(),
        invite_base_url=settings.invite_base_url,
    )


# API key security scheme for OpenAPI documentation
admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)


def require_admin_key(
    api_key: str | None = Depends(admin_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Reject requests that do not carry the configured admin key.

    An empty admin_api_key setting disables the protected endpoints
    entirely. Comparison is constant-time.
    """
    expected = settings.admin_api_key
    if not expected or api_key is None or not secrets.compare_digest(
        api_key.encode(), expected.encode()
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )
