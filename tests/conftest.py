"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Known token values used across scenarios
- Fake repositories for the domain ports
"""

from unittest.mock import Mock

import pytest

from src.domain.ports import AccountResult, Token

STORED_TOKEN = "11111111-1111-1111-1111-111111111111"


@pytest.fixture
def token_repository() -> Mock:
    """Token repository that only knows STORED_TOKEN."""
    repo = Mock()
    repo.find_token.side_effect = lambda value: (
        Token(value=value) if value == STORED_TOKEN else None
    )
    repo.add_token.return_value = True
    return repo


@pytest.fixture
def account_repository() -> Mock:
    """Account repository that accepts every registration."""
    repo = Mock()
    repo.create_account.return_value = AccountResult.CREATED
    return repo
