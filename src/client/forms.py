"""
Registration client forms - Phase-dependent input validation.

Each phase of the registration gate has its own pydantic model.
validate() picks the model from the phase and flattens pydantic errors
into a {field: message} mapping suitable for inline display.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from src.api.models import UUID_PATTERN, check_password_bytes, strip_username
from src.domain.registration import MAX_USERNAME_LENGTH

PASSWORDS_NOT_MATCHED = "Passwords not matched"
REQUIRED = "Required"
INVALID_TOKEN_FORMAT = "Invalid uuid"
FORM_ERROR_KEY = "form"

_UUID_RE = re.compile(UUID_PATTERN)

# Pydantic error types reported with a short user-facing message
_MESSAGES = {
    "missing": REQUIRED,
    "string_too_short": REQUIRED,
    "string_too_long": f"At most {MAX_USERNAME_LENGTH} characters",
    "string_type": "Expected text",
}

FieldErrors = Mapping[str, str]


class Phase(str, Enum):
    """
    Registration gate phases (forward-only).

    - AWAITING_TOKEN: only the token field is shown
    - AWAITING_REGISTRATION: token verified, username/password fields shown
    - REGISTERED: account created, terminal
    """

    AWAITING_TOKEN = "awaiting_token"
    AWAITING_REGISTRATION = "awaiting_registration"
    REGISTERED = "registered"


class TokenForm(BaseModel):
    """Token entry form."""

    token: str = Field(..., min_length=1)

    @field_validator("token")
    @classmethod
    def token_is_uuid(cls, value: str) -> str:
        if not _UUID_RE.fullmatch(value):
            raise PydanticCustomError("token_format", INVALID_TOKEN_FORMAT)
        return value


class RegisterForm(TokenForm):
    """Full registration form, shown once the token is verified."""

    username: str = Field(..., min_length=1, max_length=MAX_USERNAME_LENGTH)
    password: str = Field(..., min_length=1)
    password_confirmation: str = Field(..., min_length=1)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username_whitespace(cls, value: object) -> object:
        return strip_username(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_bytes(value)

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        # password is absent from info.data when it failed its own checks
        password = info.data.get("password")
        if password is not None and value != password:
            raise PydanticCustomError("password_mismatch", PASSWORDS_NOT_MATCHED)
        return value


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate(): either a parsed form or field errors."""

    form: TokenForm | None = None
    errors: FieldErrors = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.form is not None


_FORMS: dict[Phase, type[TokenForm]] = {
    Phase.AWAITING_TOKEN: TokenForm,
    Phase.AWAITING_REGISTRATION: RegisterForm,
}


def validate(phase: Phase, data: Mapping[str, object]) -> ValidationResult:
    """
    Validate raw form input against the ruleset of the given phase.

    Pure function: the active ruleset is selected from the phase alone.
    """
    form_class = _FORMS.get(phase)
    if form_class is None:
        return ValidationResult(errors={FORM_ERROR_KEY: "Account already created"})

    try:
        return ValidationResult(form=form_class.model_validate(dict(data)))
    except ValidationError as e:
        return ValidationResult(errors=_field_errors(e))


def _field_errors(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error["loc"]
        name = str(loc[0]) if loc else FORM_ERROR_KEY
        # First error per field wins
        errors.setdefault(name, _MESSAGES.get(error["type"], error["msg"]))
    return errors
