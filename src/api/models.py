"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from src.domain.registration import MAX_PASSWORD_BYTES, MAX_USERNAME_LENGTH

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

PASSWORD_TOO_LONG = f"Password must be at most {MAX_PASSWORD_BYTES} bytes"


def strip_username(value: object) -> object:
    """Strip surrounding whitespace so length limits apply to the stored value."""
    return value.strip() if isinstance(value, str) else value


def check_password_bytes(value: str) -> str:
    """Reject passwords bcrypt cannot hash (longer than 72 UTF-8 bytes)."""
    if len(value.encode()) > MAX_PASSWORD_BYTES:
        raise PydanticCustomError("password_too_long", PASSWORD_TOO_LONG)
    return value


class VerifyTokenResponse(BaseModel):
    """Response model for token verification."""

    valid: bool


class RegisterRequest(BaseModel):
    """Request model for account creation."""

    username: str = Field(
        ..., min_length=1, max_length=MAX_USERNAME_LENGTH, description="Desired username"
    )
    password: str = Field(
        ..., min_length=1, description=f"Account password (max {MAX_PASSWORD_BYTES} bytes)"
    )
    token: str = Field(
        ...,
        min_length=36,
        max_length=36,
        pattern=UUID_PATTERN,
        description="Invitation token (UUID)",
    )

    @field_validator("username", mode="before")
    @classmethod
    def strip_whitespace(cls, value: object) -> object:
        return strip_username(value)

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        return check_password_bytes(value)


class RegisterResponse(BaseModel):
    """Response model for successful account creation."""

    message: str
    username: str


class IssueTokenResponse(BaseModel):
    """Response model for an issued invitation."""

    token: str
    invite_url: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
